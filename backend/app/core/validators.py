"""
Input shape checks shared by the auth and employee operations.

These are pure functions: they never touch the database or the network.
"""

import re
from typing import Any, Iterable, Mapping, Optional

# local@domain.tld without whitespace; a shape gate, not a deliverability check
_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def is_email(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return _EMAIL_PATTERN.fullmatch(value) is not None


def require_fields(data: Mapping[str, Any], field_names: Iterable[str]) -> Optional[str]:
    """
    Return a message naming the first missing field, or None when all are present.

    A field is missing when it is absent, None, or an empty string. Input
    that is not an object at all has every field missing.
    """
    if not isinstance(data, Mapping):
        data = {}
    for name in field_names:
        value = data.get(name)
        if value is None or value == "":
            return f"Missing required field: {name}"
    return None
