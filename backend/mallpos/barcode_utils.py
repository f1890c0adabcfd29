from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_NON_DIGITS = re.compile(r"\D")


@dataclass(frozen=True)
class EmbeddedPrice:
    base_code: str
    price_cents: int


def parse_embedded_price_ean13(code: Optional[str]) -> Optional[EmbeddedPrice]:
    """
    Decode a variable-weight (in-store) EAN-13.

    Layout: "2" + item code (5) + price in cents (5) + two trailing digits
    (check digit and a retailer-specific flag digit, not validated).
    Non-digit characters are ignored. Returns None when the code does not
    follow the layout.
    """
    if not isinstance(code, str):
        return None
    digits = _NON_DIGITS.sub("", code)
    if len(digits) != 13 or digits[0] != "2":
        return None
    return EmbeddedPrice(base_code=digits[1:6], price_cents=int(digits[6:11]))
