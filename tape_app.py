"""
Tape Property Calculator
A Streamlit app for estimating peel, hold, stretch, aging and surface-damage
risk of pressure-sensitive adhesive tapes.

Features:
- Single-backing and two-backing composite tapes
- Reference product presets (Scotch 508, Scotch 373, tesa 60408)
- Time-based aging with UV yellowing and adhesive-residue tint
- Surface damage risk from tape pull vs. surface rupture strength
- Aging curves and surface comparison charts
- CSV export
"""

import csv
from dataclasses import replace
from io import StringIO

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import streamlit as st

import tape_calc as tc


RISK_COLOURS = {
    'none': '#4CAF50',
    'low': '#8BC34A',
    'moderate': '#FF9800',
    'high': '#F44336',
    'critical': '#9C27B0',
}


# ============================================================================
# TABLE FUNCTIONS
# ============================================================================

def build_surface_comparison_table(config: tc.TapeConfiguration) -> pd.DataFrame:
    """
    Evaluate the current tape on every reference surface.

    Returns
    -------
    pd.DataFrame
        One row per surface with peel, hold, damage risk and safety factor
    """
    rows = []
    for surface in tc.list_materials('surface'):
        surface_config = replace(config, surface=surface)
        if surface_config.second_backing:
            props = tc.compute_composite_properties(surface_config)
        else:
            props = tc.compute_properties(surface_config)
        risk = tc.calculate_surface_damage_risk(surface_config)
        rows.append({
            'Surface': surface,
            'Energy': tc.get_surface(surface).surface_energy,
            'Peel (N/cm)': round(props['peel'], 2),
            'Hold (N/cm²)': round(props['hold'], 2),
            'Risk': risk['risk'],
            'Safety Factor': (
                round(risk['safety_factor'], 2) if risk['safety_factor'] is not None else None
            ),
        })
    return pd.DataFrame(rows)


def build_material_table(category: str) -> pd.DataFrame:
    """Flatten a reference table into a DataFrame for display."""
    rows = []
    for key in tc.list_materials(category):
        record = tc.lookup_material(category, key)
        row = {'Key': key, 'Name': record.full_name}
        if category == 'backing':
            row['Thickness (µm)'] = record.thickness_um.standard
            row['Elongation (%)'] = record.elongation_pct
            row['UV Resistance'] = record.uv_resistance
        elif category == 'adhesive':
            row['Thickness (µm)'] = record.thickness_um.standard
            row['Peel (N/cm)'] = tc.normalize_peel_adhesion(record)
            row['Tack'] = record.tack_level
            row['UV Resistance'] = record.uv_resistance
        elif category == 'surface':
            row['Energy'] = record.surface_energy
            row['Texture'] = record.texture
            row['Adhesion ×'] = record.adhesion_multiplier
        elif category == 'environment':
            row['Typical °C'] = record.typical_temperature
            row['Typical RH (%)'] = record.humidity_pct.standard
            row['Adhesion ×'] = record.adhesion_multiplier
            row['Aging ×'] = record.aging_factor
        row['Description'] = record.description
        rows.append(row)
    return pd.DataFrame(rows)


# ============================================================================
# PLOTTING FUNCTIONS
# ============================================================================

def create_aging_curve_plot(config: tc.TapeConfiguration, day_range=None):
    """Plot peel/hold retention and UV/residue intensity against exposure time."""
    try:
        if day_range is None:
            day_range = np.linspace(0, tc.DAYS_PER_YEAR, 61)

        peel_retention = []
        hold_retention = []
        uv_values = []
        residue_values = []
        for day in day_range:
            day_config = replace(config, time_impact_days=float(day))
            aging = tc.calculate_aging_effects(day_config)
            peel_retention.append(aging['peel_retention'] * 100)
            hold_retention.append(aging['hold_retention'] * 100 if day > 0 else 100.0)
            uv_values.append(tc.calculate_uv_degradation(day_config) * 100)
            residue_values.append(tc.calculate_adhesive_residue(day_config) * 100)

        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))
        ax1.plot(day_range, peel_retention, linewidth=2, color='#1f77b4', label='Peel retention')
        ax1.plot(day_range, hold_retention, linewidth=2, color='#ff7f0e', label='Hold retention')
        ax1.set_xlabel('Exposure (days)', fontsize=12)
        ax1.set_ylabel('Retention (%)', fontsize=12)
        ax1.set_title('Strength Retention', fontsize=14, fontweight='bold')
        ax1.grid(True, alpha=0.3)
        ax1.legend()
        ax1.set_xlim(day_range[0], day_range[-1])

        ax2.plot(day_range, uv_values, linewidth=2, color='#FFC107', label='UV yellowing')
        ax2.plot(day_range, residue_values, linewidth=2, color='#795548', label='Adhesive residue')
        ax2.set_xlabel('Exposure (days)', fontsize=12)
        ax2.set_ylabel('Intensity (%)', fontsize=12)
        ax2.set_title('Optical Degradation', fontsize=14, fontweight='bold')
        ax2.grid(True, alpha=0.3)
        ax2.legend()
        ax2.set_xlim(day_range[0], day_range[-1])
        ax2.set_ylim(0, 100)

        fig.tight_layout()
        return fig
    except Exception as e:
        fig, ax = plt.subplots(figsize=(10, 6))
        ax.text(0.5, 0.5, f'Error creating plot: {str(e)}',
                ha='center', va='center', transform=ax.transAxes)
        return fig


def create_surface_comparison_chart(comparison: pd.DataFrame) -> plt.Figure:
    """
    Bar chart of peel adhesion per surface, coloured by damage risk.
    """
    colours = [RISK_COLOURS.get(risk, '#9E9E9E') for risk in comparison['Risk']]

    fig, ax = plt.subplots(figsize=(12, 5))
    bars = ax.bar(comparison['Surface'], comparison['Peel (N/cm)'],
                  color=colours, edgecolor='white', linewidth=1.2)
    for bar, risk in zip(bars, comparison['Risk']):
        ax.text(
            bar.get_x() + bar.get_width() / 2,
            bar.get_height(),
            risk,
            ha='center', va='bottom', fontsize=9
        )
    ax.set_ylabel('Peel Adhesion (N/cm)', fontsize=12)
    ax.set_title('Peel Adhesion and Damage Risk by Surface', fontsize=14, fontweight='bold')
    ax.grid(axis='y', alpha=0.3)
    ax.tick_params(axis='x', labelrotation=45)
    fig.tight_layout()
    return fig


# ============================================================================
# CSV EXPORT FUNCTION
# ============================================================================

def generate_csv_summary(inputs: dict, outputs: dict) -> str:
    """
    Generate a CSV summary of inputs and outputs using proper CSV formatting.
    """
    output = StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL)

    writer.writerow(['Tape Property Calculator'])
    writer.writerow([])
    writer.writerow(['INPUTS'])
    for key, value in inputs.items():
        writer.writerow([key, value])
    writer.writerow([])
    writer.writerow(['OUTPUTS'])
    for key, value in outputs.items():
        writer.writerow([key, value])

    return output.getvalue()


# ============================================================================
# MAIN STREAMLIT APP
# ============================================================================

def show_damage_risk(risk: dict):
    """Render the damage assessment with a severity matching the tier."""
    if risk['risk'] in ('none', 'low'):
        st.success(risk['message'])
    elif risk['risk'] == 'moderate':
        st.info(risk['message'])
    elif risk['risk'] == 'high':
        st.warning(risk['message'])
    else:
        st.error(risk['message'])


def main():
    """Main function to run the Streamlit app."""

    st.set_page_config(
        page_title="Tape Property Calculator",
        page_icon="🩹",
        layout="wide"
    )

    st.title("🩹 Tape Property Calculator")
    st.markdown(
        "Estimates **peel adhesion**, **hold strength** and **stretch** of pressure-sensitive "
        "adhesive tapes, with time-based aging, UV yellowing, adhesive residue and "
        "surface-damage risk."
    )

    st.sidebar.header("📊 Input Parameters")

    # ========================================================================
    # TAPE PRESETS
    # ========================================================================
    st.sidebar.subheader("🏷️ Reference Tape")

    preset_name = st.sidebar.selectbox(
        "Select Tape Preset",
        options=['Custom'] + list(tc.TAPE_PRESETS.keys()),
        help="Select a reference product to auto-populate backing, adhesive and thickness"
    )

    backings = tc.list_materials('backing')
    adhesives = tc.list_materials('adhesive')

    if preset_name != 'Custom':
        preset = tc.TAPE_PRESETS[preset_name]
        st.sidebar.info(f"📍 {preset['description']}")
        preset_backing = backings.index(preset['backing'])
        preset_adhesive = adhesives.index(preset['adhesive'])
        preset_thickness = preset['thickness_um']
    else:
        preset_backing = 0
        preset_adhesive = 0
        preset_thickness = None

    # ========================================================================
    # SECTION A: Construction
    # ========================================================================
    st.sidebar.subheader("A. Tape Construction")

    backing = st.sidebar.selectbox("Backing Material", options=backings, index=preset_backing)

    use_composite = st.sidebar.checkbox(
        "Composite (two backings)", value=False,
        help="Blend two backings sharing one adhesive layer"
    )
    second_backing = None
    if use_composite:
        second_backing = st.sidebar.selectbox("Second Backing", options=backings, index=1)

    adhesive = st.sidebar.selectbox("Adhesive", options=adhesives, index=preset_adhesive)
    adhesive_record = tc.get_adhesive(adhesive)

    thickness_um = st.sidebar.number_input(
        "Adhesive Thickness (µm)",
        min_value=5.0, max_value=500.0,
        value=float(preset_thickness or adhesive_record.thickness_um.standard),
        step=5.0,
        help=(
            f"Typical {adhesive} range: {adhesive_record.thickness_um.min:.0f}–"
            f"{adhesive_record.thickness_um.max:.0f} µm"
        )
    )

    # ========================================================================
    # SECTION B: Application
    # ========================================================================
    st.sidebar.subheader("B. Application")

    surface = st.sidebar.selectbox("Contact Surface", options=tc.list_materials('surface'))
    st.sidebar.caption(tc.get_surface(surface).description)

    environment = st.sidebar.selectbox("Environment", options=tc.list_materials('environment'))
    st.sidebar.caption(tc.get_environment(environment).description)

    time_impact_days = st.sidebar.slider(
        "Exposure Time (days)", min_value=0, max_value=tc.DAYS_PER_YEAR, value=0, step=1
    )

    with st.sidebar.expander("📏 Tape Strip Size", expanded=False):
        width_mm = st.number_input(
            "Width (mm)", min_value=1.0, max_value=200.0, value=tc.DEFAULT_WIDTH_MM, step=1.0
        )
        height_mm = st.number_input(
            "Length (mm)", min_value=1.0, max_value=1000.0, value=tc.DEFAULT_HEIGHT_MM, step=5.0
        )

    # ========================================================================
    # PERFORM CALCULATIONS
    # ========================================================================

    try:
        config = tc.TapeConfiguration(
            backing=backing,
            adhesive=adhesive,
            surface=surface,
            environment=environment,
            thickness_um=thickness_um,
            time_impact_days=time_impact_days,
            width_mm=width_mm,
            height_mm=height_mm,
            second_backing=second_backing,
        )

        if use_composite:
            props = tc.compute_composite_properties(config)
        else:
            props = tc.compute_properties(config)
        risk = tc.compute_damage_risk(config, width_mm, height_mm)
        tint = tc.compute_yellow_tint(config)

        # ====================================================================
        # DISPLAY: MAIN PROPERTIES
        # ====================================================================
        st.header("📈 Calculated Properties")
        if use_composite:
            st.caption(props['description'])

        col1, col2, col3, col4 = st.columns(4)

        with col1:
            st.metric(
                "Peel Adhesion",
                f"{props['peel']:.2f} N/cm",
                help="Force per unit width to peel the tape from the surface"
            )
        with col2:
            st.metric(
                "Hold Strength",
                f"{props['hold']:.2f} N/cm²",
                help="Resistance to sliding under sustained load"
            )
        with col3:
            st.metric("Stretch", f"{props['stretch']:.1f} %", help="Elongation at break")
        with col4:
            st.metric(
                "Total Thickness",
                f"{props['total_thickness']:.0f} µm",
                help="Standard backing + standard adhesive thickness"
            )

        temp_effect = props['temperature_effect']
        if temp_effect < 1.0:
            st.warning(
                f"⚠️ {environment} climate temperature reduces peel and hold to "
                f"{temp_effect * 100:.0f}% of nominal."
            )

        if props['aging_effect']:
            aging = props['aging_effect']
            st.subheader(f"⏳ Aging after {time_impact_days} days")
            col1, col2, col3 = st.columns(3)
            with col1:
                st.metric("Peel Retention", f"{aging['peel_retention'] * 100:.1f} %")
            with col2:
                st.metric("Hold Retention", f"{aging['hold_retention'] * 100:.1f} %")
            with col3:
                st.metric("Stretch Change", f"×{aging['stretch_change']:.3f}")

        # ====================================================================
        # DISPLAY: DAMAGE RISK & TINT
        # ====================================================================
        st.header("🧱 Surface Damage Risk")
        col1, col2 = st.columns([2, 1])
        with col1:
            show_damage_risk(risk)
            st.caption(
                f"Pull force {risk['tape_force_n_cm']:.2f} N/cm over a "
                f"{width_mm:.0f} × {height_mm:.0f} mm strip "
                f"(total {risk['total_force_n']:.1f} N)"
            )
        with col2:
            st.markdown(
                "<div style='height:60px;border:1px solid #ccc;border-radius:4px;"
                f"background:{tint['rgba']};"
                f"filter:sepia({tint['sepia']:.2f}) saturate({tint['saturate']:.2f}) "
                f"brightness({tint['brightness']:.2f}) hue-rotate({tint['hue_rotate_deg']:.1f}deg);'>"
                "</div>",
                unsafe_allow_html=True
            )
            st.caption(
                f"Yellowing {tint['combined'] * 100:.0f}% "
                f"(UV {tint['uv'] * 100:.0f}%, residue {tint['residue'] * 100:.0f}%)"
            )

        # ====================================================================
        # DISPLAY: CHARTS
        # ====================================================================
        st.header("📉 Aging Curves")
        fig1 = create_aging_curve_plot(config)
        st.pyplot(fig1)
        plt.close(fig1)

        st.header("🔍 Surface Comparison")
        comparison = build_surface_comparison_table(config)
        st.dataframe(comparison, width="stretch", hide_index=True)
        fig2 = create_surface_comparison_chart(comparison)
        st.pyplot(fig2)
        plt.close(fig2)

        with st.expander("View Reference Material Data", expanded=False):
            for category in ('backing', 'adhesive', 'surface', 'environment'):
                st.markdown(f"**{category.title()}**")
                st.dataframe(build_material_table(category), width="stretch",
                             hide_index=True)

        with st.expander("View Detailed Formulas and Assumptions", expanded=False):
            st.markdown("""
**Peel adhesion:** base × surface × environment × (t / t_std)^0.3 × low-energy penalty × retention

**Hold strength:** peel × shear multiplier × (t / t_std)^0.4 × hold retention

**Stretch:** elongation × adhesive elasticity × (t_backing / t)^0.15 × stretch change

**Aging:** retention = (daily rate ^ aging factor) ^ days; hold retention = 0.95 × retention

**Damage risk:** safety factor = surface rupture strength ÷ (hold × width)
""")

        # ====================================================================
        # CSV EXPORT
        # ====================================================================
        inputs = {
            'Backing': backing,
            'Second Backing': second_backing or '',
            'Adhesive': adhesive,
            'Surface': surface,
            'Environment': environment,
            'Adhesive Thickness (µm)': thickness_um,
            'Exposure (days)': time_impact_days,
            'Width (mm)': width_mm,
            'Length (mm)': height_mm,
        }
        outputs = {
            'Peel Adhesion (N/cm)': f"{props['peel']:.2f}",
            'Hold Strength (N/cm²)': f"{props['hold']:.2f}",
            'Stretch (%)': f"{props['stretch']:.1f}",
            'Total Thickness (µm)': f"{props['total_thickness']:.0f}",
            'Temperature Effect': f"{temp_effect:.3f}",
            'Damage Risk': risk['risk'],
            'Yellowing (%)': f"{tint['combined'] * 100:.1f}",
        }
        st.download_button(
            label="📥 Download Summary (CSV)",
            data=generate_csv_summary(inputs, outputs),
            file_name="tape_properties.csv",
            mime="text/csv"
        )

    except Exception as e:
        st.error(f"""
❌ **Calculation Error**

An error occurred: `{str(e)}`

Please check your input values and try again.
""")
        st.exception(e)

    # ========================================================================
    # FOOTER
    # ========================================================================
    st.markdown("---")
    st.markdown(
        "<div style='text-align:center;color:#666;'>"
        "<p><strong>Tape Property Calculator</strong></p>"
        "<p><em>Estimates only. Tuned against a handful of reference tapes; "
        "test on a hidden area before applying to delicate surfaces.</em></p>"
        "</div>",
        unsafe_allow_html=True
    )


# ============================================================================
# RUN THE APP
# ============================================================================

if __name__ == "__main__":
    main()
