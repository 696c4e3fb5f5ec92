"""
Projection constants, wizard stage layout and configuration loading.
"""

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

from .errors import InvalidConstantsError

# Fixed 30-day month convention (not calendar-accurate)
DAYS_PER_MONTH = 30
MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class ProjectionConstants:
    """Panel, cost and emission assumptions used by the projection."""
    panel_efficiency: float = 0.20  # 20% conversion efficiency
    panel_area_m2: float = 1.7  # m² per panel
    solar_irradiance: float = 5.5  # kWh/m²/day (average)
    system_losses: float = 0.14  # 14% system losses
    cost_per_panel: float = 250.0  # $ per panel
    installation_multiplier: float = 1.3  # 30% installation overhead
    co2_factor_kg_per_kwh: float = 0.4  # kg CO2 avoided per kWh
    projection_years: int = 5


DEFAULT_CONSTANTS = ProjectionConstants()

# Environment variables are SOLAR_<FIELD>, e.g. SOLAR_COST_PER_PANEL
ENV_PREFIX = "SOLAR_"

# Wizard stages
STAGE_CONSUMPTION = 0
STAGE_LOCATION = 1
STAGE_RESULTS = 2

STAGE_TITLES = {
    STAGE_CONSUMPTION: "Energy Consumption",
    STAGE_LOCATION: "Location & Roof",
    STAGE_RESULTS: "Results",
}

# Fields owned by each stage, in display order
STAGE_FIELDS = {
    STAGE_CONSUMPTION: ("monthly_consumption_kwh", "electricity_rate_per_kwh"),
    STAGE_LOCATION: ("location_label", "roof_area_m2", "roof_angle_deg"),
    STAGE_RESULTS: (),
}

FIELD_LABELS = {
    'monthly_consumption_kwh': 'Monthly consumption',
    'electricity_rate_per_kwh': 'Electricity rate',
    'location_label': 'Location',
    'roof_area_m2': 'Roof area',
    'roof_angle_deg': 'Roof angle',
}

ROOF_ANGLE_RANGE = (0.0, 90.0)


def field_stage(field_name: str) -> int:
    """Return the stage that owns a field; raises KeyError for unknown fields."""
    for stage, names in STAGE_FIELDS.items():
        if field_name in names:
            return stage
    raise KeyError(field_name)


def monthly_panel_yield(constants: ProjectionConstants) -> float:
    """
    Effective monthly energy produced by a single panel.

    Args:
        constants: Projection constants

    Returns:
        kWh per panel per (30-day) month
    """
    daily_yield = (
        constants.solar_irradiance
        * constants.panel_area_m2
        * constants.panel_efficiency
        * (1 - constants.system_losses)
    )
    return daily_yield * DAYS_PER_MONTH


def check_constants(constants: ProjectionConstants) -> float:
    """
    Reject constants the projection cannot use.

    Returns:
        Monthly per-panel yield

    Raises:
        InvalidConstantsError: Per-panel yield is not positive or the
            projection horizon is not a non-negative integer
    """
    panel_yield = monthly_panel_yield(constants)
    if not panel_yield > 0:
        raise InvalidConstantsError(
            f"Monthly per-panel yield must be positive, got {panel_yield!r}"
        )

    years = constants.projection_years
    if isinstance(years, bool) or not isinstance(years, int) or years < 0:
        raise InvalidConstantsError(
            f"projection_years must be a non-negative integer, got {years!r}"
        )
    return panel_yield


def _coerce(name: str, target: type, value: Any) -> Any:
    if isinstance(value, bool):
        raise InvalidConstantsError(f"{name}: expected a number, got {value!r}")
    try:
        if target is int:
            number = float(value)
            if not number.is_integer():
                raise ValueError(value)
            return int(number)
        return float(value)
    except (TypeError, ValueError):
        raise InvalidConstantsError(f"{name}: expected {target.__name__}, got {value!r}")


def load_constants(
    overrides: Optional[Mapping[str, Any]] = None,
    base: ProjectionConstants = DEFAULT_CONSTANTS
) -> ProjectionConstants:
    """
    Build projection constants from defaults plus overrides.

    Args:
        overrides: Mapping of ProjectionConstants field name to value
        base: Constants to start from

    Returns:
        ProjectionConstants with overrides applied

    Raises:
        InvalidConstantsError: Unknown key, value of the wrong type, or
            constants that give no per-panel yield
    """
    if not overrides:
        check_constants(base)
        return base

    types = {f.name: f.type for f in fields(ProjectionConstants)}
    changes: Dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in types:
            raise InvalidConstantsError(f"Unknown projection constant: {key}")
        target = int if types[key] in (int, 'int') else float
        changes[key] = _coerce(key, target, value)

    constants = replace(base, **changes)
    check_constants(constants)
    return constants


def constants_from_env(environ: Optional[Mapping[str, str]] = None) -> ProjectionConstants:
    """Load constants from SOLAR_<FIELD> environment variables."""
    if environ is None:
        environ = os.environ

    overrides = {}
    for f in fields(ProjectionConstants):
        raw = environ.get(ENV_PREFIX + f.name.upper())
        if raw is not None and raw.strip():
            overrides[f.name] = raw.strip()

    return load_constants(overrides)


def estimate_consumption_from_bill(monthly_bill: float, electricity_rate: float) -> float:
    """
    Estimate monthly electricity consumption from the monthly bill.

    Args:
        monthly_bill: Average monthly electricity bill ($)
        electricity_rate: Electricity rate ($/kWh)

    Returns:
        Estimated monthly usage in kWh
    """
    if electricity_rate <= 0:
        return 0
    return monthly_bill / electricity_rate
