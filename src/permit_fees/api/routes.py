# src/permit_fees/api/routes.py
"""
Fee computation endpoints.

Notes:
- Classification fields are all optional at the schema level; the fee engine's
  validator decides what is missing so its messages reach the caller verbatim.
- Schedule resolution never fails on missing reference data; `source` tells an
  authoritative quote ("database") from an estimate ("default").
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..db import SessionLocal
from ..models import ActivityFeeSchedule
from ..rules.classification import ClassificationRequest, ClassificationValidationError
from ..rules.composite_fee import COMPOSITE_FEE, ENVIRONMENTAL_PERMIT
from ..rules.fee_engine import FeeEngine, format_amount
from ..rules.processing_days import (
    DEFAULT_PROCESSING_DAYS,
    PROCESSING_DAYS_BY_LEVEL,
    is_known_level,
    normalise_level,
    processing_days_for_level,
)
from ..rules.schedule_lookup import SqlFeeScheduleLookup
from ..rules.working_days import add_working_days, holidays_between, public_holidays
from ..settings import settings

logger = logging.getLogger("permit-fees-api")

router = APIRouter(prefix="/api/v1/fees", tags=["Fees"])

# ============ Pydantic Models ============

class FeeCalculationRequest(BaseModel):
    activity_level: Optional[str] = Field(None, example="2.1")
    activity_type: Optional[str] = Field(None, example="Agriculture", description="Activity category")
    activity_sub_category: Optional[str] = Field(None, example="Plantations")
    permit_type: Optional[str] = Field(None, example="Environmental Permit")
    permit_type_id: Optional[str] = Field(None, example=ENVIRONMENTAL_PERMIT.identifier)
    prescribed_activity_id: Optional[str] = Field(None, description="Prescribed activity record id")
    on: Optional[date] = Field(None, description="Date the fee schedule must be effective on (default today)")

    def to_classification(self) -> ClassificationRequest:
        return ClassificationRequest(
            activity_level=self.activity_level,
            activity_type=self.activity_type,
            activity_sub_category=self.activity_sub_category,
            permit_type=self.permit_type,
            permit_type_id=self.permit_type_id,
            prescribed_activity_id=self.prescribed_activity_id,
        )


# ============ Dependencies ============

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_fee_engine(db: Session = Depends(get_db)) -> FeeEngine:
    return FeeEngine(SqlFeeScheduleLookup(db))


def get_holiday_calendar() -> Mapping[date, str]:
    return public_holidays(settings.holiday_country)


# ============ Fee Computation ============

@router.post("/calculate")
async def calculate_fee(
    request: FeeCalculationRequest, engine: FeeEngine = Depends(get_fee_engine)
) -> Dict[str, Any]:
    """
    Compute the administration fee, composite fee and total for a classification.
    Returns 422 with the validator's messages when the classification is incomplete.
    """
    try:
        breakdown = await engine.compute_fee(request.to_classification(), on=request.on)
    except ClassificationValidationError as exc:
        raise HTTPException(status_code=422, detail={"errors": list(exc.errors)})
    except Exception:
        logger.exception("Fee calculation failed")
        raise HTTPException(status_code=500, detail="fee calculation failed")

    result = breakdown.as_dict()
    result["display"] = {
        "administration_fee": format_amount(breakdown.administration_fee, breakdown.currency),
        "composite_fee": format_amount(breakdown.composite_fee, breakdown.currency),
        "total_fee": format_amount(breakdown.total_fee, breakdown.currency),
    }
    result["application_fields"] = breakdown.to_application_fields()
    result["disclaimer"] = (
        "Estimate based on the built-in default schedule; the fee notice issued after submission is authoritative."
        if breakdown.is_estimate
        else "Based on the official fee schedule for the prescribed activity."
    )
    return result


# ============ Reference Data ============

@router.get("/processing-days/{activity_level}")
def get_processing_days(
    activity_level: str,
    submitted_on: Optional[date] = Query(None, description="Submission date (default today)"),
    holiday_calendar: Mapping[date, str] = Depends(get_holiday_calendar),
) -> Dict[str, Any]:
    level = normalise_level(activity_level)
    days = processing_days_for_level(level)
    start = submitted_on or date.today()
    due = add_working_days(start, days, holiday_calendar)
    return {
        "activity_level": level,
        "processing_days": days,
        "is_statutory_level": is_known_level(level),
        "submitted_on": start.isoformat(),
        "decision_due": due.isoformat(),
        "holidays_skipped": holidays_between(start, due, holiday_calendar),
    }


@router.get("/processing-days")
def list_processing_days() -> Dict[str, Any]:
    return {
        "levels": [{"activity_level": lvl, "processing_days": d} for lvl, d in PROCESSING_DAYS_BY_LEVEL.items()],
        "default_processing_days": DEFAULT_PROCESSING_DAYS,
    }


@router.get("/environmental-permit")
def get_environmental_permit() -> Dict[str, Any]:
    return {
        "display_name": ENVIRONMENTAL_PERMIT.display_name,
        "identifier": ENVIRONMENTAL_PERMIT.identifier,
        "composite_fee": str(COMPOSITE_FEE),
    }


@router.get("/schedules")
def list_fee_schedules(
    activity_level: Optional[str] = Query(None),
    on: Optional[date] = Query(None),
    db: Session = Depends(get_db),
) -> List[Dict[str, Any]]:
    day = on or date.today()
    stmt = select(ActivityFeeSchedule).where(
        ActivityFeeSchedule.effective_start <= day,
        or_(ActivityFeeSchedule.effective_end.is_(None), ActivityFeeSchedule.effective_end >= day),
    )
    if activity_level:
        stmt = stmt.where(ActivityFeeSchedule.activity_level == normalise_level(activity_level))
    rows = db.execute(
        stmt.order_by(ActivityFeeSchedule.activity_level, ActivityFeeSchedule.activity_category)
    ).scalars().all()
    return [
        {
            "id": r.id,
            "activity_level": r.activity_level,
            "activity_category": r.activity_category,
            "activity_sub_category": r.activity_sub_category,
            "annual_recurrent_fee": str(Decimal(str(r.annual_recurrent_fee))),
            "currency": r.currency,
            "processing_days": processing_days_for_level(r.activity_level),
            "administration_form": r.administration_form,
            "technical_form": r.technical_form,
            "effective_start": r.effective_start.isoformat(),
            "effective_end": r.effective_end.isoformat() if r.effective_end else None,
            "authority": r.authority,
        }
        for r in rows
    ]
