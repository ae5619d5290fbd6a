"""Order numbers and delivery OTPs."""

import secrets
import string
from datetime import datetime

from grocery.settings import DELIVERY_OTP_LENGTH, ORDER_NUMBER_PREFIX

_BASE36 = string.digits + string.ascii_uppercase
_MAX_ATTEMPTS = 5


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_order_number(now=None) -> str:
    """``KM`` + base36 epoch milliseconds + four random base36 characters."""
    now = now or datetime.now()
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return f"{ORDER_NUMBER_PREFIX}{to_base36(millis)}{suffix}"


def unique_order_number(is_taken, now=None) -> str:
    """Generate order numbers until ``is_taken`` reports a free one."""
    for _ in range(_MAX_ATTEMPTS):
        candidate = generate_order_number(now)
        if not is_taken(candidate):
            return candidate
    raise RuntimeError(f"Could not allocate a unique order number after {_MAX_ATTEMPTS} attempts")


def generate_delivery_otp() -> str:
    return "".join(secrets.choice(string.digits) for _ in range(DELIVERY_OTP_LENGTH))
