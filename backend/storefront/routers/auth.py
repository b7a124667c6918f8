"""
# storefront/routers/auth.py — Authentication Pages Documentation

## General
Signup, login, logout, password reset and new password. Credentials are bcrypt hashes
stored on the Firestore user document; the logged-in identity lives in the signed
session cookie.

---

## Endpoints

### GET/POST /login
Form: `email`, `password`.
1. Form validation (valid e-mail, password ≥ 5 alphanumeric chars).
2. Unknown e-mail / wrong password → form re-rendered with 422 and the bad field marked.
3. Success → session written, redirect `/`.

### GET/POST /signup
Form: `name`, `email`, `password`, `confirm_password`.
1. Validation as above, plus matching passwords and an unused e-mail.
2. User stored with an empty cart, redirect `/login`.
3. Welcome e-mail is sent in the background (failures are only logged).

### POST /logout
Session destroyed, redirect `/`.

### GET/POST /reset
Form: `email`.
1. Unknown e-mail → flash message, back to `/reset`.
2. One-hour token stored on the user, reset link e-mailed in the background, redirect `/`.

### GET /reset/{token}
New-password form for a valid, unexpired token; otherwise back to `/reset` with a message.

### POST /new-password
Form: `user_id`, `password_token`, `password`. Token re-checked, password replaced,
token cleared, redirect `/login`.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, Form, Request
from fastapi.responses import RedirectResponse

from storefront.core.deps import get_db, get_mailer
from storefront.core.email_utils import send_quietly
from storefront.core.errors import NotFoundError, ValidationError
from storefront.core.security import login_session, logout_session
from storefront.core.templating import flash, pop_flash, render
from storefront.schemas.user import LoginForm, NewPasswordForm, ResetForm, SignupForm, parse_form
from storefront.services import accounts

router = APIRouter(tags=["Auth"])


def _form_page(request: Request, template: str, title: str, old_input: dict,
               error: ValidationError = None, **extra):
    return render(request, template, {
        "page_title": title,
        "error_message": error.message if error else pop_flash(request),
        "old_input": old_input,
        "validation_errors": error.fields if error else [],
        **extra,
    }, status_code=422 if error else 200)


# --------------------------------------------------------------------------- #
# LOGIN / LOGOUT
# --------------------------------------------------------------------------- #
@router.get("/login")
def get_login(request: Request):
    return _form_page(request, "auth/login.html", "Login", {"email": "", "password": ""})


@router.post("/login")
def post_login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db=Depends(get_db),
):
    old_input = {"email": email, "password": password}
    try:
        form = parse_form(LoginForm, old_input)
        user = accounts.authenticate(db, form)
    except ValidationError as e:
        return _form_page(request, "auth/login.html", "Login", old_input, e)
    login_session(request, user["id"])
    return RedirectResponse("/", status_code=303)


@router.post("/logout")
def post_logout(request: Request):
    logout_session(request)
    return RedirectResponse("/", status_code=303)


# --------------------------------------------------------------------------- #
# SIGNUP
# --------------------------------------------------------------------------- #
@router.get("/signup")
def get_signup(request: Request):
    return _form_page(request, "auth/signup.html", "Sign Up",
                      {"name": "", "email": "", "password": "", "confirm_password": ""})


@router.post("/signup")
def post_signup(
    request: Request,
    background_tasks: BackgroundTasks,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form(""),
    db=Depends(get_db),
    mailer=Depends(get_mailer),
):
    old_input = {"name": name, "email": email, "password": password, "confirm_password": confirm_password}
    try:
        form = parse_form(SignupForm, old_input)
        accounts.signup(db, form)
    except ValidationError as e:
        return _form_page(request, "auth/signup.html", "Sign Up", old_input, e)

    mail = accounts.signup_email()
    background_tasks.add_task(send_quietly, mailer, form.email, mail["subject"], mail["html"])
    return RedirectResponse("/login", status_code=303)


# --------------------------------------------------------------------------- #
# PASSWORD RESET
# --------------------------------------------------------------------------- #
@router.get("/reset")
def get_reset(request: Request):
    return _form_page(request, "auth/reset.html", "Reset Password", {"email": ""})


@router.post("/reset")
def post_reset(
    request: Request,
    background_tasks: BackgroundTasks,
    email: str = Form(""),
    db=Depends(get_db),
    mailer=Depends(get_mailer),
):
    old_input = {"email": email}
    try:
        form = parse_form(ResetForm, old_input)
    except ValidationError as e:
        return _form_page(request, "auth/reset.html", "Reset Password", old_input, e)

    try:
        token = accounts.start_password_reset(db, form.email)
    except NotFoundError as e:
        flash(request, e.message)
        return RedirectResponse("/reset", status_code=303)

    mail = accounts.reset_email(str(request.base_url), token)
    background_tasks.add_task(send_quietly, mailer, form.email, mail["subject"], mail["html"])
    return RedirectResponse("/", status_code=303)


@router.get("/reset/{token}")
def get_new_password(token: str, request: Request, db=Depends(get_db)):
    try:
        user = accounts.find_reset_user(db, token)
    except NotFoundError as e:
        flash(request, e.message)
        return RedirectResponse("/reset", status_code=303)
    return _form_page(request, "auth/new-password.html", "New Password", {"password": ""},
                      user_id=user["id"], password_token=token)


@router.post("/new-password")
def post_new_password(
    request: Request,
    password: str = Form(""),
    user_id: str = Form(""),
    password_token: str = Form(""),
    db=Depends(get_db),
):
    raw = {"password": password, "user_id": user_id, "password_token": password_token}
    try:
        form = parse_form(NewPasswordForm, raw)
    except ValidationError as e:
        return _form_page(request, "auth/new-password.html", "New Password", {"password": password}, e,
                          user_id=user_id, password_token=password_token)
    try:
        accounts.complete_password_reset(db, form)
    except NotFoundError as e:
        flash(request, e.message)
        return RedirectResponse("/reset", status_code=303)
    return RedirectResponse("/login", status_code=303)
