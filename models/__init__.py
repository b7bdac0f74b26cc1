"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for relationships to work correctly.
"""

from models.base import Base
from models.product import Product
from models.installation_rule import InstallationRule
from models.order import Order
from models.orderItem import OrderItem
from models.order_timeline import OrderTimelineEntry
from models.shipping_address import ShippingAddress

__all__ = [
    'Base',
    'Product',
    'InstallationRule',
    'Order',
    'OrderItem',
    'OrderTimelineEntry',
    'ShippingAddress',
]
