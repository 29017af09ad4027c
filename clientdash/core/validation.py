"""
Input rules shared by the API schemas and the API access layer.
"""

import re

# Addresses are stored exactly as entered; comparisons are case-insensitive.
EMAIL_PATTERN = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)


def validate_email_address(value: str) -> str:
    value = value.strip()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email address")
    return value
