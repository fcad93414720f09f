"""System-of-record access for fee schedules.

The fee engine only talks to a ``FeeScheduleLookup``; ``SqlFeeScheduleLookup``
is the implementation backed by the prescribed-activity and fee-schedule
tables. Queries run on a synchronous SQLAlchemy session in a worker thread so
the lookup is the engine's one awaitable step.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Protocol, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import ActivityFeeSchedule, PrescribedActivity

logger = logging.getLogger(__name__)

__all__ = [
    "FeeScheduleLookup",
    "ScheduleLookupError",
    "ScheduleRecord",
    "SqlFeeScheduleLookup",
]


class ScheduleLookupError(RuntimeError):
    """The system of record could not be queried."""


@dataclass(frozen=True)
class ScheduleRecord:
    annual_recurrent_fee: Decimal
    administration_form: Optional[str] = None
    technical_form: Optional[str] = None
    reference: Optional[str] = None


class FeeScheduleLookup(Protocol):
    async def by_prescribed_activity(self, prescribed_activity_id: str) -> Optional[ScheduleRecord]:
        ...

    async def by_classification(
        self,
        activity_level: str,
        activity_type: Optional[str],
        activity_sub_category: Optional[str],
        on: date,
    ) -> Optional[ScheduleRecord]:
        ...


def _same(a: Optional[str], b: Optional[str]) -> bool:
    return (a or "").strip().lower() == (b or "").strip().lower()


class SqlFeeScheduleLookup:
    def __init__(self, db: Session):
        self.db = db

    async def by_prescribed_activity(self, prescribed_activity_id: str) -> Optional[ScheduleRecord]:
        return await asyncio.to_thread(self._prescribed_activity_record, prescribed_activity_id)

    async def by_classification(
        self,
        activity_level: str,
        activity_type: Optional[str],
        activity_sub_category: Optional[str],
        on: date,
    ) -> Optional[ScheduleRecord]:
        return await asyncio.to_thread(
            self._classification_record, activity_level, activity_type, activity_sub_category, on
        )

    # ------------- blocking queries -------------

    def _prescribed_activity_record(self, prescribed_activity_id: str) -> Optional[ScheduleRecord]:
        try:
            row = (
                self.db.execute(
                    select(PrescribedActivity).where(PrescribedActivity.id == prescribed_activity_id)
                )
                .scalars()
                .first()
            )
        except SQLAlchemyError as exc:
            raise ScheduleLookupError(f"prescribed activity lookup failed: {exc}") from exc

        if row is None or row.annual_recurrent_fee is None:
            return None
        return ScheduleRecord(
            annual_recurrent_fee=Decimal(str(row.annual_recurrent_fee)),
            administration_form=row.administration_form,
            technical_form=row.technical_form,
            reference=f"prescribed_activity:{row.id}",
        )

    def _classification_record(
        self,
        activity_level: str,
        activity_type: Optional[str],
        activity_sub_category: Optional[str],
        on: date,
    ) -> Optional[ScheduleRecord]:
        """
        Most specific effective row for the level and category / sub-category.

        A row's null category or sub-category matches anything; rows with both
        null are ignored. Ties go to the latest ``effective_start``.
        """
        try:
            rows = (
                self.db.execute(
                    select(ActivityFeeSchedule)
                    .where(
                        ActivityFeeSchedule.activity_level == activity_level,
                        ActivityFeeSchedule.effective_start <= on,
                    )
                    .order_by(ActivityFeeSchedule.effective_start.desc())
                )
                .scalars()
                .all()
            )
        except SQLAlchemyError as exc:
            raise ScheduleLookupError(f"fee schedule lookup failed: {exc}") from exc

        candidates: List[Tuple[int, ActivityFeeSchedule]] = []
        for row in rows:
            if row.effective_end and row.effective_end < on:
                continue
            if row.activity_category is None and row.activity_sub_category is None:
                continue
            if row.activity_category is not None and not _same(row.activity_category, activity_type):
                continue
            if row.activity_sub_category is not None and not _same(row.activity_sub_category, activity_sub_category):
                continue
            specificity = int(row.activity_category is not None) + int(row.activity_sub_category is not None)
            candidates.append((specificity, row))

        if not candidates:
            return None
        # rows are already newest-first; max() keeps the first of equal specificity
        _, best = max(candidates, key=lambda c: c[0])
        return ScheduleRecord(
            annual_recurrent_fee=Decimal(str(best.annual_recurrent_fee)),
            administration_form=best.administration_form,
            technical_form=best.technical_form,
            reference=f"activity_fee_schedule:{best.id}",
        )
