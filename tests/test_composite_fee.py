from decimal import Decimal

import pytest

from permit_fees.rules.composite_fee import (
    COMPOSITE_FEE,
    ENVIRONMENTAL_PERMIT,
    apply_composite_fee,
    is_environmental_permit,
)


@pytest.mark.parametrize(
    "permit_type, permit_type_id",
    [
        ("environmental", None),
        ("Environmental", None),
        ("Environmental Permit", None),
        ("  ENVIRONMENTAL PERMIT ", None),
        (None, "1655df4b-bfcf-47de-85fa-c4567c749362"),
        (None, "1655DF4B-BFCF-47DE-85FA-C4567C749362"),
        ("Water Extraction", ENVIRONMENTAL_PERMIT.identifier),
    ],
)
def test_environmental_permit_matches_by_name_or_identifier(permit_type, permit_type_id):
    assert is_environmental_permit(permit_type, permit_type_id)


@pytest.mark.parametrize(
    "permit_type, permit_type_id",
    [
        (None, None),
        ("", ""),
        ("Waste Discharge", None),
        ("2.1", None),
        ("environmental-ish", "not-the-id"),
    ],
)
def test_other_permit_types_do_not_match(permit_type, permit_type_id):
    assert not is_environmental_permit(permit_type, permit_type_id)
    result = apply_composite_fee(Decimal("3000.00"), permit_type, permit_type_id)
    assert result.composite_fee == Decimal("0.00")
    assert result.total_fee == Decimal("3000.00")


def test_composite_fee_is_flat():
    small = apply_composite_fee(Decimal("12.34"), "environmental")
    large = apply_composite_fee(Decimal("90000.00"), "environmental")
    assert small.composite_fee == large.composite_fee == COMPOSITE_FEE == Decimal("2000.00")
    assert small.total_fee == Decimal("2012.34")
    assert large.total_fee == Decimal("92000.00")


def test_toggling_permit_type_never_accumulates():
    base = Decimal("9000.00")
    totals = []
    for permit_type in ["environmental", None, "environmental", "environmental", None]:
        totals.append(apply_composite_fee(base, permit_type).total_fee)
    assert totals == [
        Decimal("11000.00"),
        Decimal("9000.00"),
        Decimal("11000.00"),
        Decimal("11000.00"),
        Decimal("9000.00"),
    ]
