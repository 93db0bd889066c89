"""
Tests for the tape calculation engine.

Run: python -m pytest tests/test_tape_calc.py -v
"""

import itertools
import logging
import math
from dataclasses import replace

import pytest

import tape_calc as tc
from tape_calc import TapeConfiguration


def office_tape(**overrides):
    """BOPP + acrylic on steel, indoors, at the standard 25 µm adhesive layer."""
    params = dict(backing='BOPP', adhesive='Acrylic', surface='Steel',
                  environment='Dry', thickness_um=25.0)
    params.update(overrides)
    return TapeConfiguration(**params)


# ============================================================================
# MATERIAL DATABASE
# ============================================================================

def test_lookup_material_known_keys():
    assert tc.lookup_material('backing', 'PET').elongation_pct == 8
    assert tc.lookup_material('adhesive', 'Rubber').peel_unit == 'N/100mm'
    assert tc.lookup_material('surface', 'Glass').adhesion_multiplier == 1.05
    assert tc.lookup_material('environment', 'Arid').typical_temperature == 32


@pytest.mark.parametrize('category, default', [
    ('backing', 'PVC'),
    ('adhesive', 'Acrylic'),
    ('surface', 'Steel'),
    ('environment', 'Dry'),
])
def test_lookup_material_unknown_key_falls_back(category, default, caplog):
    with caplog.at_level(logging.WARNING, logger='tape_calc'):
        record = tc.lookup_material(category, 'Unobtainium')
    assert record.name == default
    assert 'Unobtainium' in caplog.text


def test_lookup_material_unknown_category():
    assert tc.lookup_material('glue', 'Acrylic') is None
    assert tc.list_materials('glue') == []


def test_lookup_material_has_single_public_name():
    assert not hasattr(tc, 'get_material_info')
    assert tc.lookup_material('backing', 'PVC') is tc.BACKING_MATERIALS['PVC']


def test_reference_tables_are_read_only():
    with pytest.raises(TypeError):
        tc.BACKING_MATERIALS['PVC'] = None
    with pytest.raises(AttributeError):
        tc.ADHESIVE_TYPES['Acrylic'].peel_adhesion = 1


def test_every_surface_has_a_rupture_entry_slot():
    assert set(tc.SURFACE_RUPTURE_STRENGTH) == set(tc.SURFACE_MATERIALS)
    for metal in ('Steel', 'Aluminum', 'Glass', 'Textured Glass'):
        assert tc.SURFACE_RUPTURE_STRENGTH[metal] is None


def test_config_from_state_dict():
    config = TapeConfiguration.from_dict({
        'tape': 'PET', 'adhesive': 'Silicone', 'surface': 'Photo',
        'environment': 'Humid', 'thickness': 40, 'timeImpactDays': 30,
        'width': 25, 'unrelated': 'ignored',
    })
    assert config.backing == 'PET'
    assert config.thickness_um == 40
    assert config.time_impact_days == 30
    assert config.width_mm == 25


# ============================================================================
# ADHESION MODEL
# ============================================================================

def test_reference_anchor_scotch_508_peel():
    # 260 cN/cm with every multiplier at 1
    assert tc.calculate_peel_adhesion(office_tape()) == pytest.approx(2.6)
    props = tc.compute_properties(office_tape())
    assert props['peel'] == pytest.approx(2.6)
    assert props['hold'] == pytest.approx(6.5)
    assert props['stretch'] == pytest.approx(15.0)
    assert props['total_thickness'] == 50
    assert props['temperature_effect'] == 1.0
    assert props['aging_effect'] is None


def test_rubber_peel_normalised_from_n_per_100mm():
    config = office_tape(adhesive='Rubber', thickness_um=75.0)
    assert tc.calculate_peel_adhesion(config) == pytest.approx(54.7)


def test_low_energy_penalty_by_adhesive():
    acrylic = office_tape(surface='Plastic Bag')
    rubber = office_tape(surface='Plastic Bag', adhesive='Rubber', thickness_um=75.0)
    silicone = office_tape(surface='Plastic Bag', adhesive='Silicone', thickness_um=50.0)

    assert tc.calculate_peel_adhesion(acrylic) == pytest.approx(2.6 * 0.4 * 0.5)
    assert tc.calculate_peel_adhesion(rubber) == pytest.approx(54.7 * 0.4 * 0.8)
    assert tc.calculate_peel_adhesion(silicone) == pytest.approx(2.0 * 0.4)


def test_peel_thickness_factor_is_sublinear():
    thin = tc.calculate_peel_adhesion(office_tape(thickness_um=25.0))
    thick = tc.calculate_peel_adhesion(office_tape(thickness_um=50.0))
    assert thick / thin == pytest.approx(2 ** 0.3)


def test_hold_uses_shear_multiplier_and_thickness():
    config = office_tape(adhesive='Silicone', thickness_um=100.0)
    peel = tc.calculate_peel_adhesion(config)
    assert tc.calculate_hold_strength(config) == pytest.approx(peel * 3.5 * 2 ** 0.4)


def test_unknown_adhesive_uses_default_multipliers():
    config = office_tape(adhesive='Epoxy')
    # record falls back to acrylic, multiplier tables to their defaults
    assert tc.calculate_peel_adhesion(config) == pytest.approx(2.6)
    assert tc.calculate_hold_strength(config) == pytest.approx(2.6 * 2.5)


def test_stretch_inverse_thickness():
    config = office_tape(backing='PVC', adhesive='Rubber', thickness_um=165.0)
    assert tc.calculate_stretch(config) == pytest.approx(25 * 1.15)
    thicker = office_tape(backing='PVC', thickness_um=330.0)
    assert tc.calculate_stretch(thicker) == pytest.approx(25 * 0.5 ** 0.15)


def test_floors_hold_across_all_configurations():
    combos = itertools.product(
        tc.list_materials('backing'),
        tc.list_materials('adhesive'),
        tc.list_materials('surface'),
        tc.list_materials('environment'),
        (1.0, 25.0, 200.0),
        (0, 366),
    )
    for backing, adhesive, surface, environment, thickness, days in combos:
        config = TapeConfiguration(backing, adhesive, surface, environment, thickness, days)
        assert tc.calculate_peel_adhesion(config) >= tc.MIN_PEEL_N_CM
        assert tc.calculate_hold_strength(config) >= tc.MIN_HOLD_N_CM2
        assert tc.calculate_stretch(config) >= tc.MIN_STRETCH_PCT


def test_floors_hold_on_aggregated_properties():
    backings = tc.list_materials('backing')
    combos = itertools.product(
        backings,
        tc.list_materials('adhesive'),
        tc.list_materials('surface'),
        tc.list_materials('environment'),
        (1.0, 25.0, 200.0),
        (0, 366),
    )
    for backing, adhesive, surface, environment, thickness, days in combos:
        second = backings[(backings.index(backing) + 1) % len(backings)]
        config = TapeConfiguration(backing, adhesive, surface, environment, thickness, days,
                                   second_backing=second)
        for props in (tc.compute_properties(config), tc.compute_composite_properties(config)):
            assert props['peel'] >= tc.MIN_PEEL_N_CM
            assert props['hold'] >= tc.MIN_HOLD_N_CM2
            assert props['stretch'] >= tc.MIN_STRETCH_PCT


def test_floors_reapplied_after_temperature_effect():
    # rubber on PE film in the tropics after a year: floored before the heat penalty
    config = TapeConfiguration('PVC', 'Rubber', 'Plastic Bag', 'Tropical', 75.0, 366)
    props = tc.compute_properties(config)
    assert props['temperature_effect'] < 1.0
    assert props['peel'] == tc.MIN_PEEL_N_CM
    assert props['hold'] == tc.MIN_HOLD_N_CM2

    composite = tc.compute_composite_properties(replace(config, second_backing='Paper'))
    assert composite['peel'] == pytest.approx(tc.MIN_PEEL_N_CM)
    assert composite['hold'] == pytest.approx(tc.MIN_HOLD_N_CM2)


def test_peel_floor_applies():
    config = TapeConfiguration('Paper', 'Acrylic', 'Damaged Wall Paint', 'Tropical', 1.0, 366)
    assert tc.calculate_peel_adhesion(config) == pytest.approx(tc.MIN_PEEL_N_CM)


@pytest.mark.parametrize('thickness', [0, -10, float('nan'), None])
def test_degenerate_thickness_is_clamped(thickness, caplog):
    config = office_tape(thickness_um=thickness)
    with caplog.at_level(logging.WARNING, logger='tape_calc'):
        props = tc.compute_properties(config)
    clamped = tc.compute_properties(office_tape(thickness_um=tc.MIN_THICKNESS_UM))
    assert props == clamped
    assert all(math.isfinite(props[key]) for key in ('peel', 'hold', 'stretch'))
    assert 'clamped' in caplog.text


# ============================================================================
# AGING MODEL
# ============================================================================

def test_aging_effects_formula():
    config = office_tape(time_impact_days=100)
    aging = tc.calculate_aging_effects(config)
    expected = (0.995 ** 0.8) ** 100
    assert aging['peel_retention'] == pytest.approx(expected)
    assert aging['hold_retention'] == pytest.approx(expected * 0.95)
    assert aging['stretch_change'] == pytest.approx(1 + (1 - expected) * 0.3)


def test_aging_at_zero_days_leaves_stretch_unchanged():
    aging = tc.calculate_aging_effects(office_tape(time_impact_days=0))
    assert aging['stretch_change'] == 1


def test_zero_days_equals_omitted_time():
    base = {'tape': 'PP', 'adhesive': 'Rubber', 'surface': 'Rough Carton',
            'environment': 'Humid', 'thickness': 60}
    with_zero = tc.compute_properties(dict(base, timeImpactDays=0))
    omitted = tc.compute_properties(base)
    assert with_zero == omitted
    assert with_zero['aging_effect'] is None


def test_aged_properties_apply_retention():
    fresh = tc.compute_properties(office_tape(adhesive='Rubber', thickness_um=75.0))
    aged_config = office_tape(adhesive='Rubber', thickness_um=75.0, time_impact_days=30)
    aged = tc.compute_properties(aged_config)
    aging = aged['aging_effect']

    assert aged['peel'] == pytest.approx(fresh['peel'] * aging['peel_retention'])
    assert aged['hold'] == pytest.approx(fresh['hold'] * aging['hold_retention'])
    assert aged['stretch'] == pytest.approx(fresh['stretch'] * aging['stretch_change'])


def test_optical_degradation_zero_at_zero_days():
    config = TapeConfiguration('PVC', 'Rubber', 'Manga Paper', 'Tropical', 75.0, 0)
    assert tc.calculate_uv_degradation(config) == 0
    assert tc.calculate_adhesive_residue(config) == 0
    tint = tc.compute_yellow_tint(config)
    assert tint['combined'] == 0
    assert tint['alpha'] == 0


@pytest.mark.parametrize('adhesive, surface, environment', [
    ('Acrylic', 'Steel', 'Dry'),
    ('Rubber', 'Manga Paper', 'Tropical'),
    ('Silicone', 'Wall Paint', 'Humid'),
])
def test_optical_degradation_non_decreasing(adhesive, surface, environment):
    days = [0, 1, 7, 30, 90, 180, 366, 500]
    uv, residue, combined = [], [], []
    for day in days:
        config = TapeConfiguration('PVC', adhesive, surface, environment, 50.0, day)
        uv.append(tc.calculate_uv_degradation(config))
        residue.append(tc.calculate_adhesive_residue(config))
        combined.append(tc.calculate_tape_yellow_tint(config)['combined'])

    for series in (uv, residue, combined):
        assert series == sorted(series)
        assert all(0 <= value <= 1 for value in series)


def test_uv_degradation_full_year():
    config = TapeConfiguration('PVC', 'Rubber', 'Steel', 'Tropical', 75.0, 366)
    # both poor (0.65), tropical exposure 1.5, curve reaches 1 at a full year
    assert tc.calculate_uv_degradation(config) == pytest.approx(0.65 * 1.5)


def test_uv_degradation_log_curve():
    config = TapeConfiguration('PET', 'Acrylic', 'Steel', 'Dry', 25.0, 183)
    rate = 0.4 * 0.05 + 0.6 * 0.05
    expected = rate * (0.3 + 0.7 * math.log10(1 + 9 * 0.5))
    assert tc.calculate_uv_degradation(config) == pytest.approx(expected)


def test_adhesive_residue_formula_and_cap():
    config = TapeConfiguration('BOPP', 'Acrylic', 'Paper Note', 'Dry', 25.0, 91.5)
    expected = 0.3 * 0.7 * (21 / 20) * math.sqrt(0.25) * 1.2
    assert tc.calculate_adhesive_residue(config) == pytest.approx(expected)

    capped = TapeConfiguration('BOPP', 'Rubber', 'Manga Paper', 'Tropical', 75.0, 366)
    assert tc.calculate_adhesive_residue(capped) == 1.0


def test_yellow_tint_combination():
    config = TapeConfiguration('PVC', 'Rubber', 'Paper Note', 'Humid', 75.0, 120)
    tint = tc.calculate_tape_yellow_tint(config)
    uv, residue = tint['uv'], tint['residue']
    expected = min(1, max(uv, residue) * 0.7 + (uv + residue) * 0.3)
    assert tint['combined'] == pytest.approx(expected)
    assert tint['alpha'] == pytest.approx(min(0.6, expected * 0.6))
    assert tint['rgba'].startswith('rgba(')


# ============================================================================
# TEMPERATURE EFFECT
# ============================================================================

@pytest.mark.parametrize('temperature, adhesive, expected', [
    (15, 'Acrylic', 1.0),
    (25, 'Rubber', 1.0),
    (10, 'Acrylic', 0.85),
    (-30, 'Silicone', 0.4),
    (42.5, 'Rubber', 0.75),
    (100, 'Rubber', 0.3),
    (30, 'Acrylic', 1 - (5 / 75) * 0.5),
    (50, 'Epoxy', 1 - (25 / 55) * 0.5),
])
def test_temperature_effect(temperature, adhesive, expected):
    assert tc.calculate_temperature_effect(temperature, adhesive) == pytest.approx(expected)


def test_temperature_effect_uses_typical_climate_temperature():
    props = tc.compute_properties(office_tape(environment='Tropical'))
    assert props['temperature_effect'] == pytest.approx(1 - (5 / 75) * 0.5)
    expected_peel = 2.6 * 0.65 * props['temperature_effect']
    assert props['peel'] == pytest.approx(expected_peel)


# ============================================================================
# DAMAGE RISK
# ============================================================================

@pytest.mark.parametrize('safety_factor, risk', [
    (10.0, 'low'),
    (3.0001, 'low'),
    (3.0, 'moderate'),
    (2.0, 'moderate'),
    (1.5001, 'moderate'),
    (1.5, 'high'),
    (1.2, 'high'),
    (1.0, 'critical'),
    (0.2, 'critical'),
])
def test_classify_damage_risk_boundaries(safety_factor, risk):
    assert tc.classify_damage_risk(safety_factor) == risk


def floored_wall_paint_tape():
    """Thin acrylic on new wall paint in the tropics: hold sits on its 0.5 N/cm² floor."""
    return TapeConfiguration('BOPP', 'Acrylic', 'Wall Paint', 'Tropical', 1.0)


@pytest.mark.parametrize('width_mm, safety_factor, risk', [
    (20.0, 3.0, 'moderate'),
    (40.0, 1.5, 'high'),
])
def test_damage_risk_tier_at_exact_safety_factor(width_mm, safety_factor, risk):
    config = floored_wall_paint_tape()
    assert tc.calculate_hold_strength(config) == tc.MIN_HOLD_N_CM2

    # wall paint tears at 3.0 N/cm; 0.5 N/cm² over 2 or 4 cm is exactly 1.0 or 2.0 N/cm
    assessment = tc.compute_damage_risk(config, width_mm)
    assert assessment['safety_factor'] == safety_factor
    assert assessment['risk'] == risk


@pytest.mark.parametrize('surface', ['Steel', 'Aluminum', 'Glass', 'Textured Glass'])
@pytest.mark.parametrize('adhesive', ['Acrylic', 'Rubber', 'Silicone'])
@pytest.mark.parametrize('width_mm', [5.0, 19.0, 100.0])
def test_strong_surfaces_are_never_damaged(surface, adhesive, width_mm):
    config = office_tape(surface=surface, adhesive=adhesive)
    risk = tc.compute_damage_risk(config, width_mm, 200.0)
    assert risk['can_damage'] is False
    assert risk['risk'] == 'none'
    assert risk['safety_factor'] is None


def test_damage_risk_critical_on_manga_paper():
    config = office_tape(surface='Manga Paper')
    risk = tc.compute_damage_risk(config, 19.0, 50.0)
    hold = 2.6 * 0.85 * 2.5
    assert risk['tape_force_n_cm'] == pytest.approx(hold * 1.9)
    assert risk['total_force_n'] == pytest.approx(hold * 1.9 * 5.0)
    assert risk['safety_factor'] == pytest.approx(1.5 / (hold * 1.9))
    assert risk['risk'] == 'critical'
    assert risk['can_damage'] is True
    assert 'N/cm' in risk['message']


def test_damage_risk_low_on_narrow_strip():
    config = office_tape(adhesive='Silicone', thickness_um=50.0, surface='Door Veneer')
    risk = tc.compute_damage_risk(config, width_mm=1.0)
    assert risk['safety_factor'] == pytest.approx(10.0 / (1.7 * 3.5 * 0.1))
    assert risk['risk'] == 'low'


def test_damage_risk_safety_factor_tracks_tier():
    # widths chosen to land in each tier for the reference office tape on wall paint
    config = office_tape(surface='Wall Paint')
    hold = tc.calculate_hold_strength(config)
    for target, expected in ((4.0, 'low'), (2.0, 'moderate'), (1.2, 'high'), (0.5, 'critical')):
        width_mm = 3.0 / (hold * target) * 10
        assert tc.compute_damage_risk(config, width_mm)['risk'] == expected


def test_damage_risk_default_strip_size():
    risk = tc.calculate_surface_damage_risk(office_tape(surface='Photo'))
    hold = tc.calculate_hold_strength(office_tape(surface='Photo'))
    assert risk['tape_force_n_cm'] == pytest.approx(hold * tc.DEFAULT_WIDTH_MM / 10)


# ============================================================================
# COMPOSITE TAPE
# ============================================================================

def test_harmonic_mean_of_reference_stretches():
    assert tc.harmonic_mean(25, 8) == pytest.approx(400 / 33)
    assert tc.harmonic_mean(25, 8) != pytest.approx((25 + 8) / 2)


def test_composite_blends_layers():
    config = office_tape(backing='PVC', second_backing='PET', thickness_um=50.0)
    layer1 = tc.compute_properties(office_tape(backing='PVC', thickness_um=25.0))
    layer2 = tc.compute_properties(office_tape(backing='PET', thickness_um=25.0))

    composite = tc.compute_composite_properties(config)

    assert composite['peel'] == pytest.approx(0.6 * layer1['peel'] + 0.4 * layer2['peel'])
    assert composite['hold'] == pytest.approx(0.6 * layer1['hold'] + 0.4 * layer2['hold'])
    assert composite['stretch'] == pytest.approx(
        2 * layer1['stretch'] * layer2['stretch'] / (layer1['stretch'] + layer2['stretch'])
    )
    assert composite['total_thickness'] == 165 + 36 + 25
    assert composite['description'] == 'Composite of PVC and PET'


def test_composite_from_state_dict():
    composite = tc.compute_composite_properties({
        'tape1': 'Cloth', 'tape2': 'Foam', 'adhesive': 'Rubber',
        'surface': 'Rough Carton', 'environment': 'Arid', 'thickness': 150,
        'timeImpactDays': 60,
    })
    assert composite['total_thickness'] == 250 + 800 + 75
    assert composite['aging_effect'] is not None
    assert composite['stretch'] >= tc.MIN_STRETCH_PCT


def test_composite_unknown_backing_falls_back_to_pvc():
    config = office_tape(backing='PET', second_backing='Kevlar')
    composite = tc.compute_composite_properties(config)
    assert composite['total_thickness'] == 36 + 165 + 25


# ============================================================================
# PURITY
# ============================================================================

def test_compute_properties_is_idempotent():
    config = TapeConfiguration('Foam', 'Silicone', 'Photo', 'Semiarid', 80.0, 45)
    assert tc.compute_properties(config) == tc.compute_properties(config)
    assert tc.compute_yellow_tint(config) == tc.compute_yellow_tint(config)
