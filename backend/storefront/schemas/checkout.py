"""
storefront/schemas/checkout.py - Pydantic models for the hosted checkout.
"""
from typing import Optional

from pydantic import BaseModel, Field


class LineItem(BaseModel):
    """One payment-provider line; `unit_amount` is in minor units (cents)."""
    currency: str
    unit_amount: int = Field(..., ge=0)
    name: str
    description: Optional[str] = None
    quantity: int = Field(..., ge=1)


class CheckoutSession(BaseModel):
    session_id: str
    redirect_url: str
    total: float
