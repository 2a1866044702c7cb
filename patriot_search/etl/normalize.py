"""Comparison keys used when matching places against directory records."""

import re
from typing import Optional

_NON_DIGIT = re.compile(r"\D")


def normalize_name(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def normalize_address(value: Optional[str]) -> str:
    return normalize_name(value)


def normalize_address_prefix(value: Optional[str]) -> str:
    """Street portion of an address: everything before the first comma."""
    return normalize_name(value).split(",", 1)[0].strip()


def normalize_phone(value: Optional[str]) -> str:
    return _NON_DIGIT.sub("", value or "")
