from enum import Enum


class OrderStatus(Enum):
    PROCESSING = "PROCESSING"                 # Created, awaiting dispatch
    SHIPPED = "SHIPPED"                       # Handed to carrier / installer
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"                   # Delivered (and installed, if booked)
    CANCELLED = "CANCELLED"                   # Cancelled by customer or admin
    RETURN_REQUESTED = "RETURN_REQUESTED"     # Customer asked for a return
    RETURNED = "RETURNED"                     # Return approved or completed
