"""
Card input helpers for the payment form.

Formatting follows what customers see while typing: the card number is
grouped in blocks of four, the expiry gets a slash after the month.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

CARD_NUMBER_MAX_FORMATTED_LENGTH = 19  # 16 digits + 3 spaces
CARD_NUMBER_MIN_DIGITS = 13
EXPIRY_MAX_LENGTH = 5
CVV_MIN_LENGTH = 3
CVV_MAX_LENGTH = 4

EXPIRY_PATTERN = re.compile(r"^\d{2}/\d{2}$")
_NON_DIGITS = re.compile(r"\D")

UNKNOWN_BRAND = "Unknown"

# First digit of the card number -> brand
_BRAND_PREFIXES = (
    ("4", "Visa"),
    ("5", "Mastercard"),
    ("3", "American Express"),
)


@dataclass(frozen=True)
class DemoCard:
    number: str
    brand: str
    description: str


# Form-fill shortcuts for development; not part of the payment contract.
TEST_CARDS = (
    DemoCard("4242424242424242", "Visa", "Valid test card"),
    DemoCard("5555555555554444", "Mastercard", "Valid test card"),
    DemoCard("378282246310005", "American Express", "Valid test card"),
)
TEST_CARD_EXPIRY = "12/26"
TEST_CARD_CVV = "123"
TEST_CARDHOLDER = "John Doe"


def digits_only(value: str) -> str:
    return _NON_DIGITS.sub("", value or "")


def format_card_number(value: str) -> str:
    """'4242424242424242' -> '4242 4242 4242 4242'"""
    digits = digits_only(value)
    return " ".join(digits[i:i + 4] for i in range(0, len(digits), 4))


def format_expiry(value: str) -> str:
    """'1226' -> '12/26'; anything past MM/YY is dropped."""
    digits = digits_only(value)
    if len(digits) >= 2:
        return f"{digits[:2]}/{digits[2:]}"[:EXPIRY_MAX_LENGTH]
    return digits


def detect_card_brand(card_number: str) -> str:
    digits = digits_only(card_number)
    for prefix, brand in _BRAND_PREFIXES:
        if digits.startswith(prefix):
            return brand
    return UNKNOWN_BRAND


def last_four(card_number: str) -> str:
    return digits_only(card_number)[-4:]


def mask_card_number(card_number: str) -> str:
    """'4242 4242 4242 4242' -> '4242 **** **** 4242' for the review step."""
    digits = digits_only(card_number)
    if len(digits) < 8:
        return "*" * len(digits)
    return f"{digits[:4]} **** **** {digits[-4:]}"
