"""Composite fee policy for the designated Environmental Permit category.

Environmental Permit applications carry a flat composite fee on top of the
pro-rated administration fee. Upstream data identifies the permit type either
by display name or by its canonical identifier, so both are checked here and
nowhere else.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import FrozenSet, Optional

__all__ = [
    "COMPOSITE_FEE",
    "ENVIRONMENTAL_PERMIT",
    "CompositeFee",
    "PermitCategory",
    "apply_composite_fee",
    "is_environmental_permit",
]


def _money(value: Decimal | int | float | str) -> Decimal:
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PermitCategory:
    display_name: str
    identifier: str
    aliases: FrozenSet[str] = frozenset()

    def matches(self, permit_type: Optional[str] = None, permit_type_id: Optional[str] = None) -> bool:
        name = (permit_type or "").strip().lower()
        if name and (name == self.display_name.lower() or name in self.aliases):
            return True
        ident = (permit_type_id or "").strip().lower()
        return bool(ident) and ident == self.identifier.lower()


ENVIRONMENTAL_PERMIT = PermitCategory(
    display_name="Environmental Permit",
    identifier="1655df4b-bfcf-47de-85fa-c4567c749362",
    aliases=frozenset({"environmental", "environmental permit", "environmental_permit"}),
)

# K2,000 flat, does not scale with processing days
COMPOSITE_FEE: Decimal = Decimal("2000.00")


@dataclass(frozen=True)
class CompositeFee:
    composite_fee: Decimal
    total_fee: Decimal


def is_environmental_permit(permit_type: Optional[str] = None, permit_type_id: Optional[str] = None) -> bool:
    return ENVIRONMENTAL_PERMIT.matches(permit_type, permit_type_id)


def apply_composite_fee(
    base_fee: Decimal,
    permit_type: Optional[str] = None,
    permit_type_id: Optional[str] = None,
) -> CompositeFee:
    """
    Composite fee and total for a base administration fee.

    Always derived from ``base_fee`` alone, so repeated calls with a toggled
    permit type never stack the composite fee.
    """
    base = _money(base_fee)
    composite = COMPOSITE_FEE if is_environmental_permit(permit_type, permit_type_id) else Decimal("0.00")
    return CompositeFee(composite_fee=_money(composite), total_fee=_money(base + composite))
