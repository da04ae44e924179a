"""
Custom exceptions for the storefront.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
StorefrontException (base)
├── CartException
│   └── InvalidQuantityException
├── CheckoutException
│   ├── CheckoutValidationException
│   │   ├── EmptyCartException
│   │   └── MissingCustomerInfoException
│   ├── InventoryUnavailableException
│   ├── InventoryCheckFailedException
│   ├── InventoryDeductionException
│   └── OrderCreationException
└── OrderException
    ├── OrderNotFoundException
    └── InvalidOrderStateException

Usage:
------
Services raise specific exceptions:
    raise EmptyCartException()

The UI catches and displays the message, keeping the customer on the checkout view:
    try:
        order_id = await checkout_service.place_order(cart, customer_info)
    except CheckoutException as e:
        show_error(str(e))
"""

from .base import StorefrontException
from .cart import CartException, InvalidQuantityException
from .checkout import (
    CheckoutException,
    CheckoutValidationException,
    EmptyCartException,
    MissingCustomerInfoException,
    InventoryUnavailableException,
    InventoryCheckFailedException,
    InventoryDeductionException,
    OrderCreationException
)
from .order import OrderException, OrderNotFoundException, InvalidOrderStateException

__all__ = [
    # Base
    'StorefrontException',

    # Cart
    'CartException',
    'InvalidQuantityException',

    # Checkout
    'CheckoutException',
    'CheckoutValidationException',
    'EmptyCartException',
    'MissingCustomerInfoException',
    'InventoryUnavailableException',
    'InventoryCheckFailedException',
    'InventoryDeductionException',
    'OrderCreationException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'InvalidOrderStateException',
]
