"""Kubernetes resource quantity parsing."""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional


# K8s-style size suffixes to multipliers
_QUANTITY_SUFFIXES = {
    "": Decimal(1),
    "n": Decimal(10) ** -9,
    "u": Decimal(10) ** -6,
    "m": Decimal(10) ** -3,
    "k": Decimal(1000),
    "M": Decimal(1000) ** 2,
    "G": Decimal(1000) ** 3,
    "T": Decimal(1000) ** 4,
    "P": Decimal(1000) ** 5,
    "E": Decimal(1000) ** 6,
    "Ki": Decimal(1024),
    "Mi": Decimal(1024) ** 2,
    "Gi": Decimal(1024) ** 3,
    "Ti": Decimal(1024) ** 4,
    "Pi": Decimal(1024) ** 5,
    "Ei": Decimal(1024) ** 6,
}

_QUANTITY_PATTERN = re.compile(
    r"^([+-]?(?:\d+(?:\.\d*)?|\.\d+))(?:([eE][+-]?\d+)|([A-Za-z]*))$"
)


def parse_quantity(quantity) -> Decimal:
    """Parse a K8s resource quantity into an exact decimal.

    Supports binary suffixes (Ki, Mi, Gi, Ti, Pi, Ei), decimal suffixes
    (n, u, m, k, M, G, T, P, E) and decimal exponents (e.g. "1e3").

    Args:
        quantity: Quantity string (e.g., "10Gi", "500M", "1.5Ti") or number

    Returns:
        Quantity value as a Decimal

    Raises:
        ValueError: If the quantity is invalid
    """
    if isinstance(quantity, (int, float, Decimal)) and not isinstance(quantity, bool):
        return Decimal(str(quantity))
    if not quantity:
        raise ValueError("Quantity cannot be empty")

    match = _QUANTITY_PATTERN.match(str(quantity).strip())
    if not match:
        raise ValueError(f"Invalid quantity: {quantity}")

    number, exponent, suffix = match.groups()
    try:
        value = Decimal(number)
    except InvalidOperation:
        raise ValueError(f"Invalid quantity: {quantity}")

    if exponent:
        return value * (Decimal(10) ** int(exponent[1:]))

    suffix = suffix or ""
    if suffix not in _QUANTITY_SUFFIXES:
        raise ValueError(f"Unknown quantity suffix: {suffix}")
    return value * _QUANTITY_SUFFIXES[suffix]


def parse_optional_quantity(quantity) -> Optional[Decimal]:
    """Same as parse_quantity but passes missing values through as None."""
    if quantity is None or quantity == "":
        return None
    return parse_quantity(quantity)
