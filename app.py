"""
Rooftop Solar Calculator
Streamlit application for estimating panel count, savings and payback.
"""

import logging
import os

import streamlit as st
import plotly.graph_objects as go

from solar_calc.constants import (
    FIELD_LABELS,
    STAGE_CONSUMPTION,
    STAGE_LOCATION,
    STAGE_RESULTS,
    STAGE_TITLES,
    ProjectionConstants,
    constants_from_env,
    estimate_consumption_from_bill,
    load_constants
)
from solar_calc.errors import InvalidConstantsError
from solar_calc.projection import cash_flow_frame, compute_projection
from solar_calc.wizard import WizardController

# Page configuration
st.set_page_config(
    page_title="Rooftop Solar Calculator",
    page_icon="☀️",
    layout="wide",
    initial_sidebar_state="expanded"
)

logger = logging.getLogger(__name__)


def get_constants() -> ProjectionConstants:
    """Get projection constants from Streamlit secrets or environment variables."""
    # Try Streamlit secrets first (for deployment)
    try:
        overrides = dict(st.secrets["projection"])
    except (KeyError, FileNotFoundError):
        overrides = None

    try:
        if overrides:
            return load_constants(overrides)
        # Fall back to environment variables
        return constants_from_env()
    except InvalidConstantsError as exc:
        logger.error("Invalid projection constants: %s", exc)
        st.error(
            f"Projection constants are misconfigured: {exc}. "
            "Check the `[projection]` section of `.streamlit/secrets.toml` "
            "or the `SOLAR_*` environment variables."
        )
        st.stop()


def initialize_session_state():
    """Initialize session state variables."""
    if 'wizard' not in st.session_state:
        st.session_state.wizard = WizardController()


def render_step_indicator(wizard: WizardController):
    """Render the step progress indicator."""
    cols = st.columns(len(STAGE_TITLES))
    for col, (stage, title) in zip(cols, STAGE_TITLES.items()):
        step_name = f"{stage + 1}. {title}"
        if stage < wizard.current_stage:
            col.markdown(f"✅ **{step_name}**")
        elif stage == wizard.current_stage:
            col.markdown(f"🔵 **{step_name}**")
        else:
            col.markdown(f"⚪ {step_name}")

    st.divider()


def show_field_errors(wizard: WizardController):
    """Show violations from the last blocked advance."""
    for name, message in wizard.last_errors.items():
        st.error(f"**{FIELD_LABELS[name]}:** {message}")


def render_navigation(wizard: WizardController):
    """Back / Continue buttons shared by the input stages."""
    st.divider()

    col1, col2, col3 = st.columns([1, 1, 1])
    with col1:
        if st.button("← Back", use_container_width=True,
                     disabled=wizard.current_stage == STAGE_CONSUMPTION):
            wizard.retreat()
            st.rerun()
    with col3:
        if st.button("Continue →", type="primary", use_container_width=True):
            if wizard.advance():
                st.rerun()

    show_field_errors(wizard)


def step1_consumption(wizard: WizardController):
    """Step 1: Electricity consumption and rate."""
    st.header("⚡ Step 1: Your Electricity Usage")

    values = wizard.values(STAGE_CONSUMPTION)

    col1, col2 = st.columns(2)

    with col2:
        st.subheader("Electricity Rate")
        electricity_rate = st.number_input(
            "Electricity Rate ($/kWh)",
            min_value=0.0,
            value=values['electricity_rate_per_kwh'],
            step=0.01,
            format="%.3f",
            placeholder="e.g. 0.12"
        )
        wizard.update_field('electricity_rate_per_kwh', electricity_rate)

    with col1:
        st.subheader("Enter Your Usage")

        input_method = st.radio(
            "How would you like to enter your usage?",
            ["Monthly Usage (kWh)", "Monthly Bill ($)"],
            horizontal=True
        )

        if input_method == "Monthly Bill ($)":
            monthly_bill = st.number_input(
                "Average Monthly Electric Bill",
                min_value=0.0,
                max_value=5000.0,
                value=150.0,
                step=10.0,
                format="%.0f"
            )

            # Calculate usage from bill
            monthly_usage = estimate_consumption_from_bill(
                monthly_bill,
                electricity_rate or 0
            )
            wizard.update_field('monthly_consumption_kwh', monthly_usage)

            st.info(f"Estimated monthly usage: **{monthly_usage:,.0f} kWh**")

        else:
            monthly_usage = st.number_input(
                "Monthly Electricity Usage (kWh)",
                min_value=0.0,
                value=values['monthly_consumption_kwh'],
                step=10.0,
                placeholder="e.g. 300"
            )
            wizard.update_field('monthly_consumption_kwh', monthly_usage)

    render_navigation(wizard)


def step2_location(wizard: WizardController):
    """Step 2: Location and roof parameters."""
    st.header("📍 Step 2: Location and Roof")

    values = wizard.values(STAGE_LOCATION)

    location = st.text_input(
        "Location",
        value=values['location_label'] or "",
        placeholder="City, region",
        help="Shown in the results only; production uses average irradiance"
    )
    wizard.update_field('location_label', location)

    col1, col2 = st.columns(2)
    with col1:
        roof_area = st.number_input(
            "Available Roof Area (m²)",
            min_value=0.0,
            value=values['roof_area_m2'],
            step=5.0,
            placeholder="e.g. 100"
        )
        wizard.update_field('roof_area_m2', roof_area)

    with col2:
        roof_angle = st.number_input(
            "Roof Angle (degrees)",
            value=values['roof_angle_deg'],
            step=1.0,
            placeholder="0-90",
            help="0° = flat, 90° = vertical"
        )
        wizard.update_field('roof_angle_deg', roof_angle)

    render_navigation(wizard)


def step3_results(wizard: WizardController, constants: ProjectionConstants):
    """Step 3: Results dashboard."""
    st.header("📊 Step 3: Your Solar Analysis Results")

    inputs = wizard.projection_inputs()
    result = compute_projection(inputs, constants)

    st.markdown(
        f"Based on your consumption of **{inputs.monthly_consumption_kwh:,.0f} kWh** "
        f"per month in **{result.location_label}**"
    )

    # Display key metrics
    col1, col2 = st.columns(2)
    with col1:
        st.metric(
            "Solar Panels Needed",
            f"{result.recommended_panel_count}",
            help="High-efficiency panels"
        )
    with col2:
        st.metric(
            "Estimated Total Investment",
            f"${result.total_installation_cost:,.0f}",
            help="Includes equipment and installation"
        )

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Monthly Savings", f"${result.monthly_savings:,.2f}")
        st.caption(f"${result.annual_savings:,.0f} per year")
    with col2:
        if result.has_payback:
            st.metric("Payback Period", f"{result.payback_months:.1f} months")
        else:
            st.metric("Payback Period", "No payback")
    with col3:
        st.metric("CO₂ Reduction", f"{result.annual_co2_reduction_kg:,.1f} kg/year")

    if not result.fits_on_roof:
        st.warning(
            f"The recommended system needs about {result.required_roof_area_m2:,.1f} m² "
            f"of roof, more than the {inputs.roof_area_m2:,.1f} m² available."
        )

    st.divider()

    st.subheader("📈 Return on Investment")

    frame = cash_flow_frame(result)

    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=frame['month'],
        y=frame['net_position'],
        mode='lines+markers',
        name='Net Position',
        line=dict(color='rgb(75, 192, 192)', width=3),
        fill='tozeroy',
        fillcolor='rgba(75, 192, 192, 0.2)'
    ))

    # Add break-even line
    fig.add_hline(y=0, line_dash="dash", line_color="red",
                  annotation_text="Break-even")

    fig.update_layout(
        xaxis_title="Month",
        yaxis_title="Net Position ($)",
        hovermode='x unified',
        height=400
    )

    st.plotly_chart(fig, use_container_width=True)

    # Navigation
    col1, col2, col3 = st.columns([1, 1, 1])
    with col1:
        if st.button("← Back to Location", use_container_width=True):
            wizard.retreat()
            st.rerun()
    with col3:
        if st.button("🔄 Start New Analysis", use_container_width=True):
            wizard.reset()
            st.rerun()


def main():
    """Main application entry point."""
    logging.basicConfig(level=os.environ.get("SOLAR_LOG_LEVEL", "INFO"))

    # Initialize session state
    initialize_session_state()
    wizard = st.session_state.wizard

    constants = get_constants()

    # Sidebar
    with st.sidebar:
        st.title("☀️ Solar Calculator")
        st.divider()

        st.markdown("### About")
        st.markdown("""
        This tool helps you estimate:
        - How many panels cover your consumption
        - Installation cost and monthly savings
        - Payback period and CO₂ reduction
        """)

        st.divider()

        st.markdown("### Assumptions")
        st.markdown(f"- **Panel efficiency:** {constants.panel_efficiency:.0%}")
        st.markdown(f"- **Panel area:** {constants.panel_area_m2:g} m²")
        st.markdown(f"- **Irradiance:** {constants.solar_irradiance:g} kWh/m²/day")
        st.markdown(f"- **System losses:** {constants.system_losses:.0%}")
        st.markdown(f"- **Cost per panel:** ${constants.cost_per_panel:,.0f}")
        st.markdown(f"- **Projection:** {constants.projection_years} years")

    # Main content
    st.title("☀️ Rooftop Solar Calculator")

    # Step indicator
    render_step_indicator(wizard)

    # Render current step
    if wizard.current_stage == STAGE_CONSUMPTION:
        step1_consumption(wizard)
    elif wizard.current_stage == STAGE_LOCATION:
        step2_location(wizard)
    elif wizard.current_stage == STAGE_RESULTS:
        step3_results(wizard, constants)


if __name__ == "__main__":
    main()
