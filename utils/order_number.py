import random
import string
import time
from datetime import datetime

import config

_BASE36 = string.digits + string.ascii_lowercase


def format_order_number(created_at: datetime, sequence: int, prefix: str | None = None) -> str:
    """
    Human-readable order number: <PREFIX>-YYYYMMDD-NNNNNN.

    Examples:
        format_order_number(datetime(2025, 1, 8), 1) → ORD-20250108-000001
    """
    prefix = prefix or config.ORDER_NUMBER_PREFIX
    return f"{prefix}-{created_at.strftime('%Y%m%d')}-{sequence:06d}"


def order_number_day_prefix(created_at: datetime, prefix: str | None = None) -> str:
    """Common prefix of all order numbers issued on the same day (used to count the daily sequence)."""
    prefix = prefix or config.ORDER_NUMBER_PREFIX
    return f"{prefix}-{created_at.strftime('%Y%m%d')}-"


def generate_fallback_order_id() -> str:
    """
    Local order reference used only when the order store confirms an order
    without returning its identifier.

    Format: ORD-<epoch millis>-<9 base36 chars>
    """
    suffix = ''.join(random.choices(_BASE36, k=9))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"
