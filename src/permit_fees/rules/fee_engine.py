# src/permit_fees/rules/fee_engine.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .classification import (
    ClassificationRequest,
    ClassificationValidationError,
    ValidationResult,
    validate_request,
)
from .composite_fee import apply_composite_fee
from .processing_days import normalise_level, processing_days_for_level, STATUTORY_PROCESSING_DAYS
from .schedule_lookup import FeeScheduleLookup, ScheduleLookupError, ScheduleRecord

logger = logging.getLogger(__name__)


# -------------------------------
# Helpers & common data models
# -------------------------------

DAYS_PER_YEAR = 365

CURRENCY = "PGK"

# Annual recurrent fee assumed when no schedule can be resolved
DEFAULT_ANNUAL_RECURRENT_FEE: Decimal = Decimal("18250.00")

# Statutory forms by level, used when the record does not name them
DEFAULT_FORMS: Dict[str, Tuple[str, str]] = {
    "2.1": ("ADM-2.1", "TEC-2.1"),
    "2.2": ("ADM-2.2", "TEC-2.2"),
    "2.3": ("ADM-2.3", "TEC-2.3"),
    "2.4": ("ADM-2.4", "TEC-2.4"),
    "3": ("ADM-3", "TEC-3"),
}
GENERAL_FORMS: Tuple[str, str] = ("ADM-GEN", "TEC-GEN")


def _money(x: Decimal | int | float | str) -> Decimal:
    if not isinstance(x, Decimal):
        x = Decimal(str(x))
    return x.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class FeeInvariantError(AssertionError):
    """A fee computation produced a value no correct input can produce."""


class FeeSource(Enum):
    DATABASE = "database"
    DEFAULT = "default"


@dataclass(frozen=True)
class FeeSchedule:
    annual_recurrent_fee: Decimal
    processing_days: int
    source: FeeSource
    activity_level: str = ""
    administration_form: str = GENERAL_FORMS[0]
    technical_form: str = GENERAL_FORMS[1]


@dataclass(frozen=True)
class FeeBreakdown:
    administration_fee: Decimal
    composite_fee: Decimal
    total_fee: Decimal
    processing_days: int
    administration_form: str
    technical_form: str
    source: FeeSource
    currency: str = CURRENCY

    @property
    def is_estimate(self) -> bool:
        return self.source is FeeSource.DEFAULT

    def as_dict(self) -> Dict[str, Any]:
        return {
            "administration_fee": str(self.administration_fee),
            "composite_fee": str(self.composite_fee),
            "total_fee": str(self.total_fee),
            "processing_days": self.processing_days,
            "administration_form": self.administration_form,
            "technical_form": self.technical_form,
            "source": self.source.value,
            "currency": self.currency,
        }

    def to_application_fields(self) -> Dict[str, Any]:
        """Fee fields as stored on an application draft."""
        return {
            "administration_fee": str(self.administration_fee),
            "composite_fee": str(self.composite_fee),
            # no technical fee is levied at application stage
            "technical_fee": "0.00",
            "total_fee": str(self.total_fee),
            "fee_amount": str(self.total_fee),
            "processing_days": self.processing_days,
            "administration_form": self.administration_form,
            "technical_form": self.technical_form,
            "fee_source": self.source.value,
        }


def format_amount(amount: Decimal, currency: str = CURRENCY) -> str:
    """``PGK 11,000.00`` style rendering."""
    return f"{currency} {_money(amount):,.2f}"


# -------------------------------
# Formula & aggregation
# -------------------------------

def compute_administration_fee(schedule: FeeSchedule) -> Decimal:
    """
    Pro-rated share of the annual recurrent fee:
      annual_recurrent_fee / 365 * processing_days, rounded half-up to cents.
    Multiplication happens before division so the only rounding is the final one.
    """
    if schedule.annual_recurrent_fee < 0:
        raise FeeInvariantError(f"negative annual recurrent fee: {schedule.annual_recurrent_fee}")
    if schedule.processing_days <= 0:
        raise FeeInvariantError(f"non-positive processing days: {schedule.processing_days}")
    fee = Decimal(schedule.annual_recurrent_fee) * Decimal(schedule.processing_days) / Decimal(DAYS_PER_YEAR)
    return _money(fee)


def aggregate(schedule: FeeSchedule, administration_fee: Decimal, composite_fee: Decimal) -> FeeBreakdown:
    admin = _money(administration_fee)
    composite = _money(composite_fee)
    return FeeBreakdown(
        administration_fee=admin,
        composite_fee=composite,
        total_fee=_money(admin + composite),
        processing_days=schedule.processing_days,
        administration_form=schedule.administration_form,
        technical_form=schedule.technical_form,
        source=schedule.source,
    )


# -------------------------------
# Resolution
# -------------------------------

class ActivityClassificationResolver:
    """
    Resolves the fee schedule for a classification:
      1) prescribed activity record (by id), then
      2) level + category / sub-category schedule, then
      3) the built-in default fee, marked FeeSource.DEFAULT.
    Lookup misses and lookup failures both degrade to the next step.
    """

    def __init__(
        self,
        lookup: Optional[FeeScheduleLookup] = None,
        *,
        default_annual_fee: Decimal = DEFAULT_ANNUAL_RECURRENT_FEE,
    ):
        self.lookup = lookup
        self.default_annual_fee = _money(default_annual_fee)

    async def resolve(self, request: ClassificationRequest, *, on: Optional[date] = None) -> FeeSchedule:
        level = normalise_level(request.activity_level)
        days = processing_days_for_level(level)
        default_admin_form, default_tech_form = DEFAULT_FORMS.get(level, GENERAL_FORMS)

        record = await self._lookup_record(request, level, on or date.today())
        if record is not None:
            logger.info("Fee schedule for level %s resolved from %s", level, record.reference or "database")
            return FeeSchedule(
                annual_recurrent_fee=_money(record.annual_recurrent_fee),
                processing_days=days,
                source=FeeSource.DATABASE,
                activity_level=level,
                administration_form=record.administration_form or default_admin_form,
                technical_form=record.technical_form or default_tech_form,
            )

        logger.info(
            "No fee schedule for level=%s type=%s sub_category=%s; using default annual fee %s",
            level,
            request.activity_type,
            request.activity_sub_category,
            self.default_annual_fee,
        )
        return FeeSchedule(
            annual_recurrent_fee=self.default_annual_fee,
            processing_days=days,
            source=FeeSource.DEFAULT,
            activity_level=level,
            administration_form=default_admin_form,
            technical_form=default_tech_form,
        )

    async def _lookup_record(
        self, request: ClassificationRequest, level: str, on: date
    ) -> Optional[ScheduleRecord]:
        if self.lookup is None:
            return None

        if request.prescribed_activity_id:
            try:
                record = await self.lookup.by_prescribed_activity(request.prescribed_activity_id)
            except ScheduleLookupError:
                logger.warning(
                    "Prescribed activity lookup failed for %s; trying classification",
                    request.prescribed_activity_id,
                    exc_info=True,
                )
                record = None
            if record is not None:
                return record

        try:
            return await self.lookup.by_classification(
                level, request.activity_type, request.activity_sub_category, on
            )
        except ScheduleLookupError:
            logger.warning("Classification lookup failed for level %s; falling back to default", level, exc_info=True)
            return None


# -------------------------------
# Engine
# -------------------------------

class FeeEngine:
    """
    Validate -> resolve -> pro-rate -> composite -> aggregate.

    Holds no state between calls; computing the same request twice yields
    equal breakdowns.
    """

    def __init__(self, lookup: Optional[FeeScheduleLookup] = None, *, resolver: Optional[ActivityClassificationResolver] = None):
        self.resolver = resolver or ActivityClassificationResolver(lookup)

    @staticmethod
    def validate(request: ClassificationRequest) -> ValidationResult:
        return validate_request(request)

    async def compute_fee(self, request: ClassificationRequest, *, on: Optional[date] = None) -> FeeBreakdown:
        verdict = validate_request(request)
        if not verdict.is_valid:
            raise ClassificationValidationError(verdict.errors)

        schedule = await self.resolver.resolve(request, on=on)
        administration_fee = compute_administration_fee(schedule)
        composite = apply_composite_fee(administration_fee, request.permit_type, request.permit_type_id)
        breakdown = aggregate(schedule, administration_fee, composite.composite_fee)

        if breakdown.processing_days not in STATUTORY_PROCESSING_DAYS:
            raise FeeInvariantError(f"unexpected processing days: {breakdown.processing_days}")
        if breakdown.total_fee != composite.total_fee:
            raise FeeInvariantError(f"total mismatch: {breakdown.total_fee} != {composite.total_fee}")
        return breakdown
