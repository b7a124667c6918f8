"""
storefront/schemas/cart.py - Pydantic models for the Cart.

The cart lives embedded on the user document as `{"items": [{"product_id", "quantity"}]}`.
`CartLine` is the resolved form (full product details) used by the cart page,
checkout and order placement.
"""
from pydantic import BaseModel, Field

from storefront.schemas.product import Product


class CartLine(BaseModel):
    product: Product
    quantity: int = Field(..., ge=1, description="Quantity of the product in the cart")

    @property
    def subtotal(self) -> float:
        return self.product.price * self.quantity
