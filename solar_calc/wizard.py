"""
Step-wise input collection and validation for the solar wizard.

The controller owns the raw input record and the current stage. Forward
navigation is gated on the current stage's validation; going back never
validates and never discards values.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .constants import (
    FIELD_LABELS,
    ROOF_ANGLE_RANGE,
    STAGE_CONSUMPTION,
    STAGE_FIELDS,
    STAGE_LOCATION,
    STAGE_RESULTS,
    field_stage,
)
from .errors import IncompleteRecordError
from .projection import ProjectionInputs

logger = logging.getLogger(__name__)

# Returns a violation message, or None if the value passes
RuleFn = Callable[[Any], Optional[str]]


@dataclass(frozen=True)
class ValidationOutcome:
    """Violations found for one stage, keyed by field name."""
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.is_valid


def parse_number(raw: Any) -> Optional[float]:
    """Return raw as a finite float, or None if it is not numeric."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(value):
        return None
    return value


def _is_missing(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def _positive_number(label: str) -> RuleFn:
    def rule(raw):
        if _is_missing(raw):
            return f"{label} is required"
        value = parse_number(raw)
        if value is None:
            return f"{label} must be a number"
        if value <= 0:
            return "Must be a positive number"
        return None
    return rule


def _number_in_range(label: str, low: float, high: float) -> RuleFn:
    def rule(raw):
        if _is_missing(raw):
            return f"{label} is required"
        value = parse_number(raw)
        if value is None:
            return f"{label} must be a number"
        if not low <= value <= high:
            return f"Angle must be between {low:g} and {high:g} degrees"
        return None
    return rule


def _non_empty_text(label: str) -> RuleFn:
    def rule(raw):
        if not isinstance(raw, str) or not raw.strip():
            return f"{label} is required"
        return None
    return rule


VALIDATION_RULES: Dict[int, Dict[str, RuleFn]] = {
    STAGE_CONSUMPTION: {
        'monthly_consumption_kwh': _positive_number(FIELD_LABELS['monthly_consumption_kwh']),
        'electricity_rate_per_kwh': _positive_number(FIELD_LABELS['electricity_rate_per_kwh']),
    },
    STAGE_LOCATION: {
        'location_label': _non_empty_text(FIELD_LABELS['location_label']),
        'roof_area_m2': _positive_number(FIELD_LABELS['roof_area_m2']),
        'roof_angle_deg': _number_in_range(FIELD_LABELS['roof_angle_deg'], *ROOF_ANGLE_RANGE),
    },
    STAGE_RESULTS: {},
}


class WizardController:
    """Input record, current stage and per-stage validation for one session."""

    def __init__(self):
        self.current_stage = STAGE_CONSUMPTION
        self.last_errors: Dict[str, str] = {}
        self._record: Dict[str, Any] = {}

    @property
    def is_terminal(self) -> bool:
        return self.current_stage == STAGE_RESULTS

    def update_field(self, field_name: str, raw_value: Any) -> None:
        """
        Store a raw value for a known field; unknown names raise KeyError.

        Fields owned by a stage behind the current one are frozen; writes to
        them are ignored until the user goes back to that stage.

        Raises:
            KeyError: Unknown field name
        """
        owner = field_stage(field_name)
        if owner < self.current_stage:
            logger.warning(
                "Ignoring update to frozen field %s on stage %d",
                field_name, self.current_stage
            )
            return
        self._record[field_name] = raw_value

    def values(self, stage: Optional[int] = None) -> Dict[str, Any]:
        """Copy of the raw record, or of one stage's fields."""
        if stage is None:
            return dict(self._record)
        self._check_stage(stage)
        return {name: self._record.get(name) for name in STAGE_FIELDS[stage]}

    def validate_stage(self, stage: int) -> ValidationOutcome:
        """Apply one stage's rules and report every violated field."""
        self._check_stage(stage)
        errors = {}
        for name, rule in VALIDATION_RULES[stage].items():
            message = rule(self._record.get(name))
            if message:
                errors[name] = message
        return ValidationOutcome(errors)

    def advance(self) -> bool:
        """Move to the next stage if the current one validates."""
        if self.is_terminal:
            return True

        outcome = self.validate_stage(self.current_stage)
        if not outcome.is_valid:
            self.last_errors = dict(outcome.errors)
            logger.info(
                "Advance blocked on stage %d: %s",
                self.current_stage, ", ".join(sorted(outcome.errors))
            )
            return False

        self.last_errors = {}
        self.current_stage += 1
        logger.debug("Advanced to stage %d", self.current_stage)
        return True

    def retreat(self) -> None:
        """Go back one stage. Entered values are kept."""
        self.last_errors = {}
        if self.current_stage > STAGE_CONSUMPTION:
            self.current_stage -= 1
            logger.debug("Retreated to stage %d", self.current_stage)

    def reset(self) -> None:
        """Start over with an empty record."""
        self.current_stage = STAGE_CONSUMPTION
        self.last_errors = {}
        self._record = {}

    def projection_inputs(self) -> ProjectionInputs:
        """
        Parsed snapshot of the record for the projection engine.

        Raises:
            IncompleteRecordError: Any stage fails validation
        """
        errors = {}
        for stage in VALIDATION_RULES:
            errors.update(self.validate_stage(stage).errors)
        if errors:
            raise IncompleteRecordError(errors)

        record = self._record
        return ProjectionInputs(
            monthly_consumption_kwh=parse_number(record['monthly_consumption_kwh']),
            electricity_rate_per_kwh=parse_number(record['electricity_rate_per_kwh']),
            location_label=record['location_label'].strip(),
            roof_area_m2=parse_number(record['roof_area_m2']),
            roof_angle_deg=parse_number(record['roof_angle_deg']),
        )

    @staticmethod
    def _check_stage(stage: int) -> None:
        if stage not in VALIDATION_RULES:
            raise ValueError(f"Unknown wizard stage: {stage!r}")
