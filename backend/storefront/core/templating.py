# storefront/core/templating.py
"""Jinja2 environment and the session flash list shared by the routers."""
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from storefront.core.security import is_logged_in

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def flash(request: Request, message: str) -> None:
    request.session.setdefault("flash", [])
    request.session["flash"] = [*request.session["flash"], message]


def pop_flash(request: Request) -> Optional[str]:
    """First queued message (or None); the queue is emptied either way."""
    messages: List[str] = request.session.pop("flash", []) or []
    return messages[0] if messages else None


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
):
    ctx = {
        "path": request.url.path,
        "is_authenticated": is_logged_in(request),
        **(context or {}),
    }
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)
