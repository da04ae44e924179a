from enum import Enum


class PaymentMethod(str, Enum):
    COD = "cod"  # Cash on delivery, the only supported method
