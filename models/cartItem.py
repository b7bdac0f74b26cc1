from pydantic import BaseModel, Field


class CartItemDTO(BaseModel):
    """
    Cart line submitted at checkout.

    client_price is what the storefront displayed; it is only used for logging
    price drift and never for charging.
    """
    product_id: int
    quantity: int = Field(ge=1)
    has_installation: bool = False
    client_price: float | None = None
