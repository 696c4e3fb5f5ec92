"""
Exceptions raised by the solar projection core.
"""

from typing import Dict, Optional


class SolarCalcError(Exception):
    """Base class for errors raised by solar_calc."""


class InvalidConstantsError(SolarCalcError, ValueError):
    """Projection constants are nonsensical (configuration fault, not user input)."""


class IncompleteRecordError(SolarCalcError):
    """Projection inputs were requested from a record that does not validate."""

    def __init__(self, errors: Optional[Dict[str, str]] = None):
        self.errors = dict(errors or {})
        fields = ", ".join(sorted(self.errors)) or "unknown"
        super().__init__(f"Input record is incomplete: {fields}")
