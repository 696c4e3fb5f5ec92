"""Core modules for the Rooftop Solar Calculator."""

from .constants import (
    DEFAULT_CONSTANTS,
    FIELD_LABELS,
    STAGE_CONSUMPTION,
    STAGE_FIELDS,
    STAGE_LOCATION,
    STAGE_RESULTS,
    STAGE_TITLES,
    ProjectionConstants,
    check_constants,
    constants_from_env,
    estimate_consumption_from_bill,
    load_constants,
    monthly_panel_yield
)

from .errors import (
    IncompleteRecordError,
    InvalidConstantsError,
    SolarCalcError
)

from .projection import (
    ProjectionInputs,
    ProjectionResult,
    calculate_offset_percentage,
    cash_flow_frame,
    compute_projection
)

from .wizard import (
    ValidationOutcome,
    WizardController
)
