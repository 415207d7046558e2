# hydroscan/domain/money.py
"""
Fixed-point money helpers.

Every stored amount is an integer number of centavos. Conversion to
Decimal or text happens only at the edges (HTTP schemas, CSV).
"""
from decimal import Decimal

CENTAVOS_PER_PESO = 100
_TWO_PLACES = Decimal("0.01")


def to_decimal(centavos: int) -> Decimal:
    return (Decimal(centavos) / CENTAVOS_PER_PESO).quantize(_TWO_PLACES)


def format_money(centavos: int) -> str:
    return f"{to_decimal(centavos):.2f}"
