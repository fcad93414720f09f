"""Classification requests and the checks run on them before any lookup."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple

__all__ = [
    "ClassificationRequest",
    "ClassificationValidationError",
    "ValidationResult",
    "validate_request",
]

ACTIVITY_LEVEL_REQUIRED = "Activity level is required"
ACTIVITY_CATEGORY_REQUIRED = "Activity category or sub-category is required"


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    txt = str(value).strip()
    return txt or None


@dataclass(frozen=True)
class ClassificationRequest:
    """Activity classification of a single application, as supplied by the caller."""

    activity_level: Optional[str] = None
    activity_type: Optional[str] = None
    activity_sub_category: Optional[str] = None
    permit_type: Optional[str] = None
    permit_type_id: Optional[str] = None
    prescribed_activity_id: Optional[str] = None

    def __post_init__(self) -> None:
        for name in (
            "activity_level",
            "activity_type",
            "activity_sub_category",
            "permit_type",
            "permit_type_id",
            "prescribed_activity_id",
        ):
            object.__setattr__(self, name, _clean(getattr(self, name)))

    @classmethod
    def from_application(cls, data: Mapping[str, Any]) -> "ClassificationRequest":
        """Build a request from an application draft (snake_case draft keys)."""

        return cls(
            activity_level=data.get("activity_level"),
            activity_type=data.get("activity_category") or data.get("activity_type"),
            activity_sub_category=data.get("activity_subcategory") or data.get("activity_sub_category"),
            permit_type=data.get("permit_type"),
            permit_type_id=data.get("permit_type_id"),
            prescribed_activity_id=data.get("prescribed_activity_id"),
        )


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: Tuple[str, ...] = ()


class ClassificationValidationError(ValueError):
    """Raised when a classification request is rejected before computation."""

    def __init__(self, errors: Tuple[str, ...] | List[str]):
        self.errors = tuple(errors)
        super().__init__("; ".join(self.errors))


def validate_request(request: ClassificationRequest) -> ValidationResult:
    errors: List[str] = []
    if not request.activity_level:
        errors.append(ACTIVITY_LEVEL_REQUIRED)
    if not (request.activity_type or request.activity_sub_category):
        errors.append(ACTIVITY_CATEGORY_REQUIRED)
    return ValidationResult(is_valid=not errors, errors=tuple(errors))
