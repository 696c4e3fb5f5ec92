"""
Financial and environmental projection for a rooftop solar installation.
Pure functions of validated inputs and projection constants.
"""

import logging
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pandas as pd

from .constants import (
    DEFAULT_CONSTANTS,
    MONTHS_PER_YEAR,
    ProjectionConstants,
    check_constants,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectionInputs:
    """Parsed snapshot of a complete wizard record."""
    monthly_consumption_kwh: float
    electricity_rate_per_kwh: float
    location_label: str
    roof_area_m2: float
    roof_angle_deg: float


@dataclass(frozen=True)
class ProjectionResult:
    """Results of the solar projection."""
    recommended_panel_count: int
    total_installation_cost: float
    monthly_savings: float
    annual_savings: float
    payback_months: float  # inf when annual_savings is zero
    annual_co2_reduction_kg: float
    cash_flow_series: Tuple[float, ...]  # Net position at the end of each month
    monthly_production_kwh: float
    offset_percentage: float
    required_roof_area_m2: float
    fits_on_roof: bool
    location_label: str

    @property
    def has_payback(self) -> bool:
        return math.isfinite(self.payback_months)


def calculate_offset_percentage(
    monthly_production_kwh: float,
    monthly_usage_kwh: float
) -> float:
    """
    Calculate what percentage of electricity usage is offset by solar.

    Args:
        monthly_production_kwh: Monthly solar production
        monthly_usage_kwh: Monthly electricity usage

    Returns:
        Offset percentage (0-100+, can exceed 100 if overproducing)
    """
    if monthly_usage_kwh <= 0:
        return 0
    return (monthly_production_kwh / monthly_usage_kwh) * 100


def build_cash_flow_series(
    total_installation_cost: float,
    monthly_savings: float,
    projection_years: int
) -> Tuple[float, ...]:
    """
    Net position per month for the results chart.

    Each point is savings for (i + 1) months, with the upfront cost
    subtracted from the first point only. Points are not a running sum.
    """
    months = np.arange(1, projection_years * MONTHS_PER_YEAR + 1)
    investment = np.zeros(len(months))
    if len(months):
        investment[0] = -total_installation_cost
    return tuple((investment + monthly_savings * months).tolist())


def compute_projection(
    inputs: ProjectionInputs,
    constants: ProjectionConstants = DEFAULT_CONSTANTS
) -> ProjectionResult:
    """
    Calculate the solar projection for a complete set of inputs.

    Args:
        inputs: Validated wizard inputs
        constants: Panel, cost and emission assumptions

    Returns:
        ProjectionResult with panel count, costs, savings and cash flow

    Raises:
        InvalidConstantsError: Per-panel yield is not positive or the
            projection horizon is not a non-negative integer
    """
    panel_yield = check_constants(constants)
    years = constants.projection_years

    consumption = inputs.monthly_consumption_kwh
    rate = inputs.electricity_rate_per_kwh

    # Sizing
    panel_count = math.ceil(consumption / panel_yield)
    total_cost = panel_count * constants.cost_per_panel * constants.installation_multiplier

    # Savings
    monthly_savings = consumption * rate
    annual_savings = monthly_savings * MONTHS_PER_YEAR

    # Payback in months
    if annual_savings == 0:
        payback_months = math.inf
    else:
        payback_months = (total_cost / annual_savings) * MONTHS_PER_YEAR

    co2_reduction = consumption * constants.co2_factor_kg_per_kwh * MONTHS_PER_YEAR

    production = panel_count * panel_yield
    required_area = panel_count * constants.panel_area_m2

    result = ProjectionResult(
        recommended_panel_count=panel_count,
        total_installation_cost=total_cost,
        monthly_savings=monthly_savings,
        annual_savings=annual_savings,
        payback_months=payback_months,
        annual_co2_reduction_kg=co2_reduction,
        cash_flow_series=build_cash_flow_series(total_cost, monthly_savings, years),
        monthly_production_kwh=production,
        offset_percentage=calculate_offset_percentage(production, consumption),
        required_roof_area_m2=required_area,
        fits_on_roof=required_area <= inputs.roof_area_m2,
        location_label=inputs.location_label,
    )
    logger.debug(
        "Projection for %s: %d panels, cost %.2f, payback %.2f months",
        inputs.location_label, panel_count, total_cost, payback_months
    )
    return result


def cash_flow_frame(result: ProjectionResult) -> pd.DataFrame:
    """Cash-flow series as a DataFrame with month, year and net_position columns."""
    months = np.arange(1, len(result.cash_flow_series) + 1)
    return pd.DataFrame({
        'month': months,
        'year': (months - 1) // MONTHS_PER_YEAR + 1,
        'net_position': list(result.cash_flow_series),
    })
