from __future__ import annotations
from typing import Optional
import datetime
from decimal import Decimal

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, Numeric, Date, Text

class Base(DeclarativeBase):
    pass


class PrescribedActivity(Base):
    """Canonical prescribed-activity record from the Environment Act schedule."""

    __tablename__ = "prescribed_activities"

    # opaque identifier (UUID text) referenced by intent registrations
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    activity_level: Mapped[str] = mapped_column(String(12))
    category_number: Mapped[Optional[str]] = mapped_column(String(12))
    category_type: Mapped[Optional[str]] = mapped_column(String(120))
    sub_category: Mapped[Optional[str]] = mapped_column(String(120))
    activity_description: Mapped[str] = mapped_column(Text)

    annual_recurrent_fee: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    administration_form: Mapped[Optional[str]] = mapped_column(String(64))
    technical_form: Mapped[Optional[str]] = mapped_column(String(64))


class ActivityFeeSchedule(Base):
    """
    Fee schedule keyed by activity level and category / sub-category.

    A null category or sub-category does not constrain the match; at least
    one of them is expected to be set.
    """

    __tablename__ = "activity_fee_schedules"

    id: Mapped[int] = mapped_column(primary_key=True)
    activity_level: Mapped[str] = mapped_column(String(12))
    activity_category: Mapped[Optional[str]] = mapped_column(String(120))
    activity_sub_category: Mapped[Optional[str]] = mapped_column(String(120))

    annual_recurrent_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    currency: Mapped[str] = mapped_column(String(3), default="PGK")
    administration_form: Mapped[Optional[str]] = mapped_column(String(64))
    technical_form: Mapped[Optional[str]] = mapped_column(String(64))

    effective_start: Mapped[datetime.date] = mapped_column(Date)
    effective_end: Mapped[Optional[datetime.date]] = mapped_column(Date)
    authority: Mapped[Optional[str]] = mapped_column(String(512))
