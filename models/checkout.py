from pydantic import BaseModel, Field

from enums.payment_method import PaymentMethod
from enums.vehicle_segment import VehicleSegment
from models.cartItem import CartItemDTO
from models.installation_price import InstallationPriceDTO
from models.shipping_address import ShippingAddressDTO


class CheckoutRequestDTO(BaseModel):
    items: list[CartItemDTO] = Field(default_factory=list)
    shipping_address: ShippingAddressDTO
    payment_method: PaymentMethod
    vehicle_segment: VehicleSegment | None = None
    vehicle_model: str | None = None


class PricedLineItemDTO(BaseModel):
    """Server-priced cart line; unit_price and installation_cost are per unit."""
    product_id: int
    product_name: str
    quantity: int
    unit_price: float
    has_installation: bool = False
    installation_cost: float = 0.0
    installation: InstallationPriceDTO | None = None
    line_total: float


class PricedOrderDTO(BaseModel):
    line_items: list[PricedLineItemDTO]
    total: float
    vehicle_segment: VehicleSegment | None = None


class CreatedOrderDTO(BaseModel):
    order_id: int
    total: float
    currency: str
    gateway_order_id: str | None = None
    gateway_key_id: str | None = None
