from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"        # Order placed, awaiting shop confirmation
    CONFIRMED = "confirmed"    # Confirmed by shop
    SHIPPING = "shipping"      # Handed over for delivery
    DELIVERED = "delivered"    # Delivered, cash collected (final)
