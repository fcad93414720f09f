import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import datetime
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from permit_fees.models import ActivityFeeSchedule, Base, PrescribedActivity

PLANTATION_ID = "5b0c1f6e-2d7a-4c61-9a52-0c4e8f1d2a01"


@pytest.fixture
def db_session():
    """In-memory SQLite session with a handful of reference rows."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    db = TestingSessionLocal()
    db.add_all(
        [
            PrescribedActivity(
                id=PLANTATION_ID,
                activity_level="2.1",
                category_number="2.1",
                category_type="Agriculture",
                sub_category="Plantations",
                activity_description="Plantation development covering more than 500 hectares",
                annual_recurrent_fee=Decimal("36500.00"),
                administration_form="ADM-2.1",
                technical_form="TEC-2.1",
            ),
            PrescribedActivity(
                id="unpriced-activity",
                activity_level="2.2",
                activity_description="Activity awaiting gazettal of its fee",
                annual_recurrent_fee=None,
            ),
            ActivityFeeSchedule(
                activity_level="3",
                activity_category="Mining",
                annual_recurrent_fee=Decimal("146000.00"),
                administration_form="ADM-3",
                technical_form="TEC-3",
                effective_start=datetime.date(2018, 1, 1),
            ),
            ActivityFeeSchedule(
                activity_level="3",
                activity_category="Mining",
                activity_sub_category="Alluvial",
                annual_recurrent_fee=Decimal("73000.00"),
                administration_form="ADM-3A",
                technical_form="TEC-3A",
                effective_start=datetime.date(2018, 1, 1),
            ),
            ActivityFeeSchedule(
                activity_level="2.2",
                activity_category="Fisheries",
                annual_recurrent_fee=Decimal("29200.00"),
                effective_start=datetime.date(2018, 1, 1),
                effective_end=datetime.date(2023, 12, 31),
            ),
            ActivityFeeSchedule(
                activity_level="2.2",
                activity_category="Fisheries",
                annual_recurrent_fee=Decimal("36500.00"),
                effective_start=datetime.date(2024, 1, 1),
            ),
            ActivityFeeSchedule(
                activity_level="2.3",
                activity_category=None,
                activity_sub_category=None,
                annual_recurrent_fee=Decimal("99999.00"),
                effective_start=datetime.date(2018, 1, 1),
            ),
        ]
    )
    db.commit()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()
