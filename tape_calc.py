"""
Tape Property Calculator - Calculation Engine

Estimates mechanical and visual-aging properties of pressure-sensitive
adhesive (PSA) tape constructions from backing, adhesive, contacted surface,
climate class, adhesive thickness and exposure time.

Reference datapoints:
- 3M Scotch 508: 25 µm BOPP backing + 15 µm acrylic = 40 µm total, 260 cN/cm adhesion
- 3M Scotch 373: 41 µm PP backing + 23 µm rubber = 64 µm total, 54.7 N/100mm adhesion
- tesa 60408: 125 µm paper backing with natural rubber, 2.8 N/cm adhesion
- Typical ranges: office tapes 25-50 µm, masking 80-150 µm, packaging 60-100 µm

Every function here is a pure mapping from a configuration to a result.
The reference tables are built once at import and are read-only.
"""

import logging
import math
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Mapping, Optional


logger = logging.getLogger("tape_calc")


# ============================================================================
# MODEL CONSTANTS
# ============================================================================

MIN_PEEL_N_CM = 0.1
MIN_HOLD_N_CM2 = 0.5
MIN_STRETCH_PCT = 1.0
MIN_THICKNESS_UM = 1.0

DAYS_PER_YEAR = 366
OPTIMAL_TEMP_RANGE_C = (15.0, 25.0)

DEFAULT_WIDTH_MM = 19.0   # standard office tape roll
DEFAULT_HEIGHT_MM = 50.0

COMPOSITE_PRIMARY_WEIGHT = 0.6
COMPOSITE_SECONDARY_WEIGHT = 0.4

TINT_MAX_ALPHA = 0.6
TINT_RGB = (255, 214, 102)


# ============================================================================
# REFERENCE RECORDS
# ============================================================================

@dataclass(frozen=True)
class Range:
    """Min/max/standard (or typical) triple, units given by the owning field."""
    min: float
    max: float
    standard: Optional[float] = None


@dataclass(frozen=True)
class BackingMaterial:
    name: str
    full_name: str
    thickness_um: Range
    tensile_strength: float   # MPa (PP: N/100mm, as published for 3M 373)
    elongation_pct: float     # % at break
    temperature_range_c: Range
    uv_resistance: str
    description: str


@dataclass(frozen=True)
class AdhesiveType:
    name: str
    full_name: str
    thickness_um: Range
    peel_adhesion: float      # in peel_unit
    peel_unit: str
    tack_level: str
    temperature_range_c: Range
    uv_resistance: str
    aging_stability: str
    shear_strength: str
    color_stability: str
    surface_affinity: Mapping[str, str]
    description: str


@dataclass(frozen=True)
class SurfaceMaterial:
    name: str
    full_name: str
    surface_energy: str       # low | medium | high
    texture: str
    adhesion_multiplier: float
    residue_absorption: float  # 0.1 non-porous ... 0.9 absorbent paper
    description: str


@dataclass(frozen=True)
class EnvironmentalCondition:
    name: str
    full_name: str
    temperature_c: Range      # standard holds the typical value
    humidity_pct: Range
    adhesion_multiplier: float
    aging_factor: float
    uv_exposure: float
    description: str

    @property
    def typical_temperature(self) -> float:
        return self.temperature_c.standard


@dataclass(frozen=True)
class SurfaceRuptureEntry:
    """Force per unit width (N/cm) the surface withstands before tearing."""
    min_n_cm: float
    max_n_cm: float
    typical_n_cm: float


# ============================================================================
# MATERIAL DATABASE
# ============================================================================

BACKING_MATERIALS = MappingProxyType({
    'PVC': BackingMaterial(
        name='PVC',
        full_name='PVC (Polyvinyl Chloride)',
        thickness_um=Range(150, 180, 165),
        tensile_strength=30,
        elongation_pct=25,
        temperature_range_c=Range(-10, 60),
        uv_resistance='poor',
        description='Standard electrical/insulation tape backing',
    ),
    'PET': BackingMaterial(
        name='PET',
        full_name='PET (Polyester)',
        thickness_um=Range(25, 50, 36),
        tensile_strength=220,
        elongation_pct=8,
        temperature_range_c=Range(-40, 150),
        uv_resistance='excellent',
        description='High-performance polyester film, very rigid',
    ),
    'PP': BackingMaterial(
        name='PP',
        full_name='PP (Polypropylene)',
        thickness_um=Range(25, 50, 41),
        tensile_strength=525,
        elongation_pct=40,
        temperature_range_c=Range(-20, 80),
        uv_resistance='good',
        description='Polypropylene film for packaging/sealing',
    ),
    'BOPP': BackingMaterial(
        name='BOPP',
        full_name='BOPP (Biaxially Oriented Polypropylene)',
        thickness_um=Range(20, 30, 25),
        tensile_strength=140,
        elongation_pct=15,
        temperature_range_c=Range(-20, 80),
        uv_resistance='good',
        description='Clear office tape backing (Scotch 508)',
    ),
    'Paper': BackingMaterial(
        name='Paper',
        full_name='Paper (Kraft/Crepe)',
        thickness_um=Range(80, 150, 125),
        tensile_strength=40,
        elongation_pct=2,
        temperature_range_c=Range(0, 50),
        uv_resistance='fair',
        description="Masking/painter's tape or packaging tape backing",
    ),
    'Cloth': BackingMaterial(
        name='Cloth',
        full_name='Cloth (Fabric/Scrim)',
        thickness_um=Range(200, 300, 250),
        tensile_strength=80,
        elongation_pct=12,
        temperature_range_c=Range(-10, 70),
        uv_resistance='good',
        description='Duct/gaffer tape backing with fabric reinforcement',
    ),
    'Foam': BackingMaterial(
        name='Foam',
        full_name='Foam (PE/PU)',
        thickness_um=Range(400, 3000, 800),
        tensile_strength=2,
        elongation_pct=200,
        temperature_range_c=Range(-20, 80),
        uv_resistance='fair',
        description='Double-sided mounting tape with foam core',
    ),
})

ADHESIVE_TYPES = MappingProxyType({
    'Acrylic': AdhesiveType(
        name='Acrylic',
        full_name='Acrylic PSA',
        thickness_um=Range(15, 50, 25),
        peel_adhesion=260,
        peel_unit='cN/cm',
        tack_level='medium',
        temperature_range_c=Range(-40, 100),
        uv_resistance='excellent',
        aging_stability='excellent',
        shear_strength='high',
        color_stability='non-yellowing',
        surface_affinity=MappingProxyType({
            'high_energy': 'excellent', 'low_energy': 'poor', 'porous': 'good',
        }),
        description='UV-stable, clear, excellent aging. Best for metals/glass.',
    ),
    'Rubber': AdhesiveType(
        name='Rubber',
        full_name='Rubber-based PSA',
        thickness_um=Range(50, 125, 75),
        peel_adhesion=547,
        peel_unit='N/100mm',
        tack_level='high',
        temperature_range_c=Range(-20, 60),
        uv_resistance='poor',
        aging_stability='fair',
        shear_strength='medium',
        color_stability='yellows over time',
        surface_affinity=MappingProxyType({
            'high_energy': 'excellent', 'low_energy': 'good', 'porous': 'excellent',
        }),
        description='High initial tack, bonds low-energy plastics. Degrades in UV/heat.',
    ),
    'Silicone': AdhesiveType(
        name='Silicone',
        full_name='Silicone PSA',
        thickness_um=Range(25, 75, 50),
        peel_adhesion=200,
        peel_unit='cN/cm',
        tack_level='low',
        temperature_range_c=Range(-40, 260),
        uv_resistance='excellent',
        aging_stability='excellent',
        shear_strength='very high',
        color_stability='stable',
        surface_affinity=MappingProxyType({
            'high_energy': 'fair', 'low_energy': 'fair', 'porous': 'poor',
            'silicone': 'excellent',
        }),
        description='Extreme temperature tolerance. Low adhesion but high cohesion.',
    ),
})


def _surface(name, full_name, energy, texture, multiplier, absorption, description):
    return SurfaceMaterial(name, full_name, energy, texture, multiplier, absorption, description)


SURFACE_MATERIALS = MappingProxyType({
    'Steel': _surface(
        'Steel', 'Steel (Stainless/Cold Rolled)', 'high', 'smooth', 1.0, 0.1,
        'Standard test surface. High energy, excellent bonding.'),
    'Aluminum': _surface(
        'Aluminum', 'Aluminum (Mill Finish)', 'high', 'smooth', 0.95, 0.1,
        'Similar to steel but slightly lower adhesion due to oxide layer.'),
    'Glass': _surface(
        'Glass', 'Glass (Smooth)', 'high', 'very smooth', 1.05, 0.1,
        'Excellent for acrylic PSAs. Very high surface energy.'),
    'Textured Glass': _surface(
        'Textured Glass', 'Glass (Textured/Frosted)', 'high', 'rough', 0.75, 0.2,
        'Reduced contact area. Requires thicker adhesive layer (125 µm recommended).'),
    'Plastic Bag': _surface(
        'Plastic Bag', 'Plastic Bag (PE/LDPE)', 'low', 'smooth', 0.4, 0.15,
        'Low-energy substrate. Poor bonding without LSE adhesive or primer.'),
    'Door Veneer': _surface(
        'Door Veneer', 'Door Veneer (Wood)', 'medium', 'smooth to medium', 0.85, 0.5,
        'Porous substrate. Good mechanical interlock. May absorb adhesive.'),
    'Paper Note': _surface(
        'Paper Note', 'Paper Note (Smooth)', 'high', 'smooth', 0.9, 0.7,
        'High energy but can absorb adhesive. Risk of fiber tear on removal.'),
    'Manga Paper': _surface(
        'Manga Paper', 'Manga Paper (Uncoated)', 'high', 'smooth', 0.85, 0.9,
        'Absorbent paper. Will show damage on peel. Use low-tack tape.'),
    'Sketchbook Paper': _surface(
        'Sketchbook Paper', 'Sketchbook Paper (Textured)', 'high', 'medium', 0.8, 0.85,
        'Textured surface reduces contact. Fiber damage likely on removal.'),
    'Rough Carton': _surface(
        'Rough Carton', 'Rough Carton (Corrugated)', 'medium', 'rough', 0.7, 0.8,
        'Porous and rough. Requires thick adhesive (125 µm). Good mechanical lock.'),
    'Wall Paint': _surface(
        'Wall Paint', 'Wall Paint (Smooth/New)', 'medium', 'smooth', 0.6, 0.4,
        'Use only low-tack masking tape. Risk of paint pull if paint <24h old.'),
    'Damaged Wall Paint': _surface(
        'Damaged Wall Paint', 'Wall Paint (Damaged/Old)', 'low', 'rough', 0.3, 0.6,
        'Very high risk of paint removal. Use delicate-surface masking tape only.'),
    'Photo': _surface(
        'Photo', 'Photo Print (Instax/Glossy)', 'medium', 'smooth', 0.75, 0.3,
        'Requires acid-free/archival tape. Standard tapes may damage image.'),
})

ENVIRONMENTAL_CONDITIONS = MappingProxyType({
    'Humid': EnvironmentalCondition(
        name='Humid',
        full_name='Humid (Temperate Humid)',
        temperature_c=Range(15, 25, 20),
        humidity_pct=Range(70, 90, 80),
        adhesion_multiplier=0.75,
        aging_factor=1.2,
        uv_exposure=0.9,
        description='High moisture can form micro-barrier preventing wet-out. Reduced tack.',
    ),
    'Tropical': EnvironmentalCondition(
        name='Tropical',
        full_name='Tropical (Hot & Humid)',
        temperature_c=Range(25, 35, 30),
        humidity_pct=Range(75, 95, 85),
        adhesion_multiplier=0.65,
        aging_factor=1.5,
        uv_exposure=1.5,
        description='Worst case: heat softens adhesive + moisture barrier. Bond failure risk.',
    ),
    'Semiarid': EnvironmentalCondition(
        name='Semiarid',
        full_name='Semiarid (Mediterranean)',
        temperature_c=Range(20, 30, 25),
        humidity_pct=Range(30, 50, 40),
        adhesion_multiplier=0.95,
        aging_factor=1.0,
        uv_exposure=1.2,
        description='Balanced conditions. Moderate heat, low moisture. Good performance.',
    ),
    'Arid': EnvironmentalCondition(
        name='Arid',
        full_name='Arid (Desert/Hot Dry)',
        temperature_c=Range(25, 40, 32),
        humidity_pct=Range(10, 30, 20),
        adhesion_multiplier=0.85,
        aging_factor=1.3,
        uv_exposure=1.4,
        description='High heat accelerates adhesive flow/creep. Dry surfaces bond well initially.',
    ),
    'Dry': EnvironmentalCondition(
        name='Dry',
        full_name='Dry (Temperate Dry/Indoor)',
        temperature_c=Range(18, 25, 21),
        humidity_pct=Range(20, 40, 30),
        adhesion_multiplier=1.0,
        aging_factor=0.8,
        uv_exposure=1.0,
        description='Ideal conditions. Recommended storage: 20°C/50%RH. Best performance.',
    ),
})

# None: the bond always fails before the surface does
SURFACE_RUPTURE_STRENGTH = MappingProxyType({
    'Steel': None,
    'Aluminum': None,
    'Glass': None,
    'Textured Glass': None,
    'Plastic Bag': SurfaceRuptureEntry(3.0, 6.0, 4.5),
    'Door Veneer': SurfaceRuptureEntry(8.0, 15.0, 10.0),
    'Paper Note': SurfaceRuptureEntry(1.5, 3.0, 2.0),
    'Manga Paper': SurfaceRuptureEntry(1.0, 2.0, 1.5),
    'Sketchbook Paper': SurfaceRuptureEntry(2.0, 4.0, 3.0),
    'Rough Carton': SurfaceRuptureEntry(4.0, 8.0, 6.0),
    'Wall Paint': SurfaceRuptureEntry(2.0, 5.0, 3.0),
    'Damaged Wall Paint': SurfaceRuptureEntry(0.5, 1.5, 1.0),
    'Photo': SurfaceRuptureEntry(3.0, 6.0, 4.0),
})

DEFAULT_KEYS = MappingProxyType({
    'backing': 'PVC',
    'adhesive': 'Acrylic',
    'surface': 'Steel',
    'environment': 'Dry',
})

MATERIAL_TABLES = MappingProxyType({
    'backing': BACKING_MATERIALS,
    'adhesive': ADHESIVE_TYPES,
    'surface': SURFACE_MATERIALS,
    'environment': ENVIRONMENTAL_CONDITIONS,
})


# ============================================================================
# PER-ADHESIVE AND PER-TIER FACTORS
# ============================================================================

SHEAR_MULTIPLIERS = MappingProxyType({'Acrylic': 2.5, 'Rubber': 2.0, 'Silicone': 3.5})
ADHESIVE_ELASTICITY = MappingProxyType({'Acrylic': 1.0, 'Rubber': 1.15, 'Silicone': 0.95})
LOW_ENERGY_PENALTY = MappingProxyType({'Acrylic': 0.5, 'Rubber': 0.8})

# fraction of strength retained per day before environmental adjustment
DAILY_RETENTION = MappingProxyType({'Acrylic': 0.995, 'Rubber': 0.980, 'Silicone': 0.997})
HEAT_TOLERANCE_C = MappingProxyType({'Acrylic': 100.0, 'Rubber': 60.0, 'Silicone': 260.0})
RESIDUE_PROPENSITY = MappingProxyType({'Acrylic': 0.3, 'Rubber': 0.8, 'Silicone': 0.1})

UV_DEGRADATION_RATES = MappingProxyType({
    'excellent': 0.05,
    'good': 0.15,
    'fair': 0.35,
    'poor': 0.65,
})

DEFAULT_SHEAR_MULTIPLIER = 2.5
DEFAULT_ELASTICITY = 1.0
DEFAULT_DAILY_RETENTION = 0.990
DEFAULT_HEAT_TOLERANCE_C = 80.0
DEFAULT_RESIDUE_PROPENSITY = 0.4
DEFAULT_UV_RATE = UV_DEGRADATION_RATES['fair']


# ============================================================================
# REFERENCE PRODUCT PRESETS
# ============================================================================

TAPE_PRESETS = {
    'Scotch 508 (office)': {
        'backing': 'BOPP',
        'adhesive': 'Acrylic',
        'thickness_um': 15.0,
        'description': '25 µm BOPP + 15 µm acrylic, 260 cN/cm on steel'
    },
    'Scotch 373 (packaging)': {
        'backing': 'PP',
        'adhesive': 'Rubber',
        'thickness_um': 23.0,
        'description': '41 µm PP + 23 µm rubber, 54.7 N/100mm on steel'
    },
    'tesa 60408 (paper)': {
        'backing': 'Paper',
        'adhesive': 'Rubber',
        'thickness_um': 75.0,
        'description': '125 µm paper with natural rubber, 2.8 N/cm'
    },
}


# ============================================================================
# LOOKUP HELPERS
# ============================================================================

def lookup(table: Mapping, key, default_key):
    """
    Resolve ``key`` in ``table``, falling back to ``table[default_key]``.

    Every table access in the engine goes through here so the fallback
    policy lives in one place. Unknown keys are logged, never raised.
    """
    if key in table:
        return table[key]
    logger.warning("Unknown key %r, falling back to %r", key, default_key)
    return table[default_key]


def lookup_factor(table: Mapping, key, default: float) -> float:
    """Resolve a per-key numeric factor with a documented default."""
    return table.get(key, default)


def lookup_material(category: str, key):
    """
    Return the reference record for ``key`` in ``category``.

    Category is one of ``backing``, ``adhesive``, ``surface`` or
    ``environment``. Unknown keys resolve to the category's default record;
    an unknown category returns None.
    """
    table = MATERIAL_TABLES.get(category)
    if table is None:
        logger.warning("Unknown material category %r", category)
        return None
    return lookup(table, key, DEFAULT_KEYS[category])


def list_materials(category: str) -> list:
    """Keys available in a category, in table order."""
    table = MATERIAL_TABLES.get(category)
    return list(table.keys()) if table is not None else []


def get_backing(key) -> BackingMaterial:
    return lookup(BACKING_MATERIALS, key, DEFAULT_KEYS['backing'])


def get_adhesive(key) -> AdhesiveType:
    return lookup(ADHESIVE_TYPES, key, DEFAULT_KEYS['adhesive'])


def get_surface(key) -> SurfaceMaterial:
    return lookup(SURFACE_MATERIALS, key, DEFAULT_KEYS['surface'])


def get_environment(key) -> EnvironmentalCondition:
    return lookup(ENVIRONMENTAL_CONDITIONS, key, DEFAULT_KEYS['environment'])


def get_rupture_strength(key) -> Optional[SurfaceRuptureEntry]:
    """Rupture entry for the surface, resolved through the surface fallback."""
    surface = get_surface(key)
    return SURFACE_RUPTURE_STRENGTH.get(surface.name)


# ============================================================================
# TAPE CONFIGURATION
# ============================================================================

@dataclass(frozen=True)
class TapeConfiguration:
    """
    Single input record threaded through the calculation pipeline.

    ``thickness_um`` is the adhesive layer thickness. ``second_backing`` is
    only read by the composite model.
    """
    backing: str = 'PVC'
    adhesive: str = 'Acrylic'
    surface: str = 'Steel'
    environment: str = 'Dry'
    thickness_um: float = 25.0
    time_impact_days: float = 0
    width_mm: Optional[float] = None
    height_mm: Optional[float] = None
    second_backing: Optional[str] = None

    # state-record keys used by the form layer
    _ALIASES = {
        'tape': 'backing',
        'tape1': 'backing',
        'tape2': 'second_backing',
        'thickness': 'thickness_um',
        'timeImpactDays': 'time_impact_days',
        'width': 'width_mm',
        'height': 'height_mm',
    }

    @classmethod
    def from_dict(cls, params: dict) -> 'TapeConfiguration':
        """Build a configuration from a state dict; unknown keys are ignored."""
        fields = {}
        for key, value in params.items():
            name = cls._ALIASES.get(key, key)
            if name in cls.__dataclass_fields__ and value is not None:
                fields[name] = value
        return cls(**fields)

    @property
    def effective_thickness(self) -> float:
        return _safe_thickness(self.thickness_um)

    @property
    def elapsed_days(self) -> float:
        days = self.time_impact_days or 0
        return max(0.0, float(days))


def _safe_thickness(thickness_um) -> float:
    try:
        value = float(thickness_um)
    except (TypeError, ValueError):
        value = float('nan')
    if not math.isfinite(value) or value < MIN_THICKNESS_UM:
        logger.warning(
            "Thickness %r µm out of range, clamped to %.1f µm", thickness_um, MIN_THICKNESS_UM
        )
        return MIN_THICKNESS_UM
    return value


def _as_config(config) -> TapeConfiguration:
    if isinstance(config, TapeConfiguration):
        return config
    return TapeConfiguration.from_dict(config)


# ============================================================================
# ADHESION MODEL
# ============================================================================

def normalize_peel_adhesion(adhesive: AdhesiveType) -> float:
    """
    Convert the adhesive's native peel value to N/cm.

    Rubber's published value (N/100mm) is divided by 10, the others (cN/cm)
    by 100: 547 -> 54.7, 260 -> 2.6.
    """
    if adhesive.peel_unit == 'N/100mm':
        return adhesive.peel_adhesion / 10
    return adhesive.peel_adhesion / 100


def calculate_thickness_factor(thickness_um: float, standard_um: float, exponent: float) -> float:
    """Sub-linear thickness scaling ``(thickness / standard) ** exponent``."""
    return (thickness_um / standard_um) ** exponent


def calculate_low_energy_penalty(surface: SurfaceMaterial, adhesive_key: str) -> float:
    """Penalty for acrylic/rubber on low-energy substrates (PE, PP, old paint)."""
    if surface.surface_energy != 'low':
        return 1.0
    return lookup_factor(LOW_ENERGY_PENALTY, adhesive_key, 1.0)


def _instant_peel_adhesion(config: TapeConfiguration) -> float:
    adhesive = get_adhesive(config.adhesive)
    surface = get_surface(config.surface)
    environment = get_environment(config.environment)

    base_adhesion = normalize_peel_adhesion(adhesive)
    thickness_factor = calculate_thickness_factor(
        config.effective_thickness, adhesive.thickness_um.standard, 0.3
    )
    penalty = calculate_low_energy_penalty(surface, config.adhesive)

    peel = (
        base_adhesion
        * surface.adhesion_multiplier
        * environment.adhesion_multiplier
        * thickness_factor
        * penalty
    )
    return max(MIN_PEEL_N_CM, peel)


def calculate_peel_adhesion(config) -> float:
    """
    Calculate peel adhesion strength.

    Base adhesion x surface multiplier x environment multiplier x
    thickness factor x low-energy penalty, then x peel retention when an
    exposure time is set.

    Parameters
    ----------
    config : TapeConfiguration or dict
        Tape configuration

    Returns
    -------
    float
        Peel adhesion in N/cm, never below 0.1
    """
    config = _as_config(config)
    peel = _instant_peel_adhesion(config)
    if config.elapsed_days > 0:
        peel *= calculate_aging_effects(config)['peel_retention']
    return max(MIN_PEEL_N_CM, peel)


def calculate_hold_strength(config) -> float:
    """
    Calculate shear/hold strength.

    Shear resistance scales faster with thickness than peel because more
    cohesive bulk resists sliding. Aging is applied through the hold
    retention factor, not through the aged peel value.

    Parameters
    ----------
    config : TapeConfiguration or dict
        Tape configuration

    Returns
    -------
    float
        Hold strength in N/cm², never below 0.5
    """
    config = _as_config(config)
    adhesive = get_adhesive(config.adhesive)

    multiplier = lookup_factor(SHEAR_MULTIPLIERS, config.adhesive, DEFAULT_SHEAR_MULTIPLIER)
    thickness_factor = calculate_thickness_factor(
        config.effective_thickness, adhesive.thickness_um.standard, 0.4
    )
    hold = _instant_peel_adhesion(config) * multiplier * thickness_factor

    if config.elapsed_days > 0:
        hold *= calculate_aging_effects(config)['hold_retention']
    return max(MIN_HOLD_N_CM2, hold)


def calculate_stretch(config) -> float:
    """
    Calculate elongation at break.

    Parameters
    ----------
    config : TapeConfiguration or dict
        Tape configuration

    Returns
    -------
    float
        Stretch in %, never below 1
    """
    config = _as_config(config)
    backing = get_backing(config.backing)

    elasticity = lookup_factor(ADHESIVE_ELASTICITY, config.adhesive, DEFAULT_ELASTICITY)
    # thicker layer, relatively less stretch
    thickness_factor = calculate_thickness_factor(
        backing.thickness_um.standard, config.effective_thickness, 0.15
    )
    stretch = backing.elongation_pct * elasticity * thickness_factor

    if config.elapsed_days > 0:
        stretch *= calculate_aging_effects(config)['stretch_change']
    return max(MIN_STRETCH_PCT, stretch)


def calculate_total_thickness(backing_key, adhesive_key) -> float:
    """Standard backing thickness plus standard adhesive thickness (µm)."""
    backing = get_backing(backing_key)
    adhesive = get_adhesive(adhesive_key)
    return backing.thickness_um.standard + adhesive.thickness_um.standard


# ============================================================================
# AGING MODEL
# ============================================================================

def calculate_aging_effects(config) -> dict:
    """
    Calculate retention factors after the configured exposure time.

    The adhesive's daily retention is raised to the environment aging factor
    and then to the number of elapsed days.

    Returns
    -------
    dict
        peel_retention, hold_retention, stretch_change
    """
    config = _as_config(config)
    environment = get_environment(config.environment)

    daily = lookup_factor(DAILY_RETENTION, config.adhesive, DEFAULT_DAILY_RETENTION)
    adjusted_rate = daily ** environment.aging_factor
    retention = adjusted_rate ** config.elapsed_days

    return {
        'peel_retention': retention,
        # shear degrades slightly faster than peel
        'hold_retention': retention * 0.95,
        # creep: the aged material extends further
        'stretch_change': 1 + (1 - retention) * 0.3,
    }


def _year_fraction(days: float) -> float:
    return min(max(days, 0.0), DAYS_PER_YEAR) / DAYS_PER_YEAR


def calculate_uv_degradation(config) -> float:
    """
    UV yellowing intensity in [0, 1].

    Backing and adhesive UV tiers are blended 40/60 (adhesive yellowing
    dominates visually), scaled by the climate's UV exposure, and run through
    a logarithmic curve: fast initial yellowing that decelerates.
    """
    config = _as_config(config)
    days = config.elapsed_days
    if days <= 0:
        return 0.0

    backing = get_backing(config.backing)
    adhesive = get_adhesive(config.adhesive)
    environment = get_environment(config.environment)

    backing_rate = lookup_factor(UV_DEGRADATION_RATES, backing.uv_resistance, DEFAULT_UV_RATE)
    adhesive_rate = lookup_factor(UV_DEGRADATION_RATES, adhesive.uv_resistance, DEFAULT_UV_RATE)
    combined_rate = (0.4 * backing_rate + 0.6 * adhesive_rate) * environment.uv_exposure

    fraction = _year_fraction(days)
    curve = 0.3 + 0.7 * math.log10(1 + 9 * fraction)
    return min(1.0, combined_rate * curve)


def calculate_adhesive_residue(config) -> float:
    """
    Adhesive residue (staining) intensity in [0, 1].

    Residue builds slowly (square-root curve) and grows with the adhesive's
    migration propensity, the surface's absorbency and temperature.
    """
    config = _as_config(config)
    days = config.elapsed_days
    if days <= 0:
        return 0.0

    surface = get_surface(config.surface)
    environment = get_environment(config.environment)

    propensity = lookup_factor(RESIDUE_PROPENSITY, config.adhesive, DEFAULT_RESIDUE_PROPENSITY)
    temp_factor = min(2.0, max(0.5, environment.typical_temperature / 20))
    time_factor = math.sqrt(_year_fraction(days))

    residue = propensity * surface.residue_absorption * temp_factor * time_factor
    return min(1.0, residue * 1.2)


def calculate_tape_yellow_tint(config) -> dict:
    """
    Combine UV yellowing and residue into a single tint descriptor.

    Returns
    -------
    dict
        combined, uv, residue, alpha, rgba and visual filter parameters
        (sepia, saturate, brightness, hue_rotate_deg), all monotonic in
        ``combined``
    """
    uv = calculate_uv_degradation(config)
    residue = calculate_adhesive_residue(config)

    combined = min(1.0, max(uv, residue) * 0.7 + (uv + residue) * 0.3)
    alpha = min(TINT_MAX_ALPHA, combined * TINT_MAX_ALPHA)
    r, g, b = TINT_RGB

    return {
        'combined': combined,
        'uv': uv,
        'residue': residue,
        'alpha': alpha,
        'rgba': f"rgba({r}, {g}, {b}, {alpha:.3f})",
        'sepia': combined * 0.8,
        'saturate': 1 + combined * 0.5,
        'brightness': 1 - combined * 0.15,
        'hue_rotate_deg': -combined * 10,
    }


# ============================================================================
# TEMPERATURE EFFECT
# ============================================================================

def calculate_temperature_effect(temperature_c: float, adhesive) -> float:
    """
    Temperature multiplier on peel and hold.

    Full performance in 15-25 °C. Cold: 3 % loss per degree below 15 °C,
    floored at 0.4. Hot: linear loss up to 50 % at the adhesive's heat
    tolerance, floored at 0.3.
    """
    optimal_min, optimal_max = OPTIMAL_TEMP_RANGE_C

    if optimal_min <= temperature_c <= optimal_max:
        return 1.0

    if temperature_c < optimal_min:
        cold_penalty = (optimal_min - temperature_c) * 0.03
        return max(0.4, 1.0 - cold_penalty)

    max_temp = lookup_factor(HEAT_TOLERANCE_C, adhesive, DEFAULT_HEAT_TOLERANCE_C)
    heat_penalty = (temperature_c - optimal_max) / (max_temp - optimal_max)
    return max(0.3, 1.0 - heat_penalty * 0.5)


# ============================================================================
# TAPE PROPERTIES (AGGREGATOR)
# ============================================================================

def calculate_tape_properties(config) -> dict:
    """
    Calculate the full property set for one tape configuration.

    Parameters
    ----------
    config : TapeConfiguration or dict
        Tape configuration

    Returns
    -------
    dict
        peel (N/cm), hold (N/cm²), stretch (%), total_thickness (µm),
        aging_effect (dict or None), temperature_effect
    """
    config = _as_config(config)

    peel = calculate_peel_adhesion(config)
    hold = calculate_hold_strength(config)
    stretch = calculate_stretch(config)

    environment = get_environment(config.environment)
    temp_effect = calculate_temperature_effect(environment.typical_temperature, config.adhesive)

    return {
        'peel': max(MIN_PEEL_N_CM, peel * temp_effect),
        'hold': max(MIN_HOLD_N_CM2, hold * temp_effect),
        'stretch': stretch,
        'total_thickness': calculate_total_thickness(config.backing, config.adhesive),
        'aging_effect': calculate_aging_effects(config) if config.elapsed_days > 0 else None,
        'temperature_effect': temp_effect,
    }


# ============================================================================
# DAMAGE RISK
# ============================================================================

def classify_damage_risk(safety_factor: float) -> str:
    """Map a safety factor to low / moderate / high / critical."""
    if safety_factor > 3:
        return 'low'
    if safety_factor > 1.5:
        return 'moderate'
    if safety_factor > 1:
        return 'high'
    return 'critical'


_RISK_MESSAGES = {
    'low': (
        "Low risk: the surface ({strength:.2f} N/cm) is {sf:.1f}x stronger than the "
        "tape pull ({force:.2f} N/cm). Clean removal expected."
    ),
    'moderate': (
        "Moderate risk: tape pull of {force:.2f} N/cm against a surface strength of "
        "{strength:.2f} N/cm ({sf:.1f}x margin). Peel slowly at a low angle."
    ),
    'high': (
        "High risk: tape pull of {force:.2f} N/cm is close to the surface strength of "
        "{strength:.2f} N/cm ({sf:.2f}x margin). Surface lifting is likely."
    ),
    'critical': (
        "Critical: tape pull of {force:.2f} N/cm exceeds the surface strength of "
        "{strength:.2f} N/cm. The surface will tear before the bond releases."
    ),
}


def calculate_surface_damage_risk(config) -> dict:
    """
    Compare the tape's pull force against the surface rupture strength.

    Parameters
    ----------
    config : TapeConfiguration or dict
        Tape configuration; width_mm/height_mm default to 19 mm x 50 mm

    Returns
    -------
    dict
        can_damage, risk, safety_factor, tape_force_n_cm, total_force_n,
        surface_strength, message
    """
    config = _as_config(config)
    width_mm = config.width_mm if config.width_mm and config.width_mm > 0 else DEFAULT_WIDTH_MM
    height_mm = config.height_mm if config.height_mm and config.height_mm > 0 else DEFAULT_HEIGHT_MM

    hold = calculate_hold_strength(config)
    tape_force = hold * (width_mm / 10)
    total_force = hold * (width_mm / 10) * (height_mm / 10)

    surface = get_surface(config.surface)
    rupture = get_rupture_strength(config.surface)

    if rupture is None:
        return {
            'can_damage': False,
            'risk': 'none',
            'safety_factor': None,
            'tape_force_n_cm': tape_force,
            'total_force_n': total_force,
            'surface_strength': None,
            'message': (
                f"{surface.full_name} is stronger than the adhesive bond; "
                "the tape will release before the surface is damaged."
            ),
        }

    safety_factor = rupture.typical_n_cm / tape_force
    risk = classify_damage_risk(safety_factor)
    return {
        'can_damage': True,
        'risk': risk,
        'safety_factor': safety_factor,
        'tape_force_n_cm': tape_force,
        'total_force_n': total_force,
        'surface_strength': rupture,
        'message': _RISK_MESSAGES[risk].format(
            force=tape_force, strength=rupture.typical_n_cm, sf=safety_factor
        ),
    }


# ============================================================================
# COMPOSITE TAPE
# ============================================================================

def harmonic_mean(a: float, b: float) -> float:
    """Harmonic mean of two positive values."""
    return 2 * a * b / (a + b)


def calculate_mixed_tape_properties(config) -> dict:
    """
    Blend two backings sharing one adhesive budget into a composite tape.

    Each layer is evaluated with half the configured adhesive thickness.
    Peel and hold are weighted 60/40 toward the first (surface-contact)
    backing; stretch uses the harmonic mean so the stiffer layer limits
    the composite.

    Returns
    -------
    dict
        Same keys as ``calculate_tape_properties`` plus description
    """
    config = _as_config(config)
    second = config.second_backing or config.backing
    half = config.effective_thickness / 2

    props1 = calculate_tape_properties(replace(config, thickness_um=half, second_backing=None))
    props2 = calculate_tape_properties(
        replace(config, backing=second, thickness_um=half, second_backing=None)
    )

    w1, w2 = COMPOSITE_PRIMARY_WEIGHT, COMPOSITE_SECONDARY_WEIGHT
    total_thickness = (
        get_backing(config.backing).thickness_um.standard
        + get_backing(second).thickness_um.standard
        + get_adhesive(config.adhesive).thickness_um.standard
    )

    return {
        'peel': props1['peel'] * w1 + props2['peel'] * w2,
        'hold': props1['hold'] * w1 + props2['hold'] * w2,
        'stretch': harmonic_mean(props1['stretch'], props2['stretch']),
        'total_thickness': total_thickness,
        'aging_effect': props1['aging_effect'],
        'temperature_effect': props1['temperature_effect'],
        'description': f"Composite of {config.backing} and {second}",
    }


# ============================================================================
# PUBLIC CALL SURFACE
# ============================================================================

def compute_properties(config) -> dict:
    """Property set for a single-backing tape."""
    return calculate_tape_properties(config)


def compute_composite_properties(config) -> dict:
    """Property set for a two-backing composite tape."""
    return calculate_mixed_tape_properties(config)


def compute_damage_risk(config, width_mm: float = None, height_mm: float = None) -> dict:
    """Damage-risk assessment for a tape strip of the given size."""
    config = _as_config(config)
    overrides = {}
    if width_mm is not None:
        overrides['width_mm'] = width_mm
    if height_mm is not None:
        overrides['height_mm'] = height_mm
    return calculate_surface_damage_risk(replace(config, **overrides))


def compute_yellow_tint(config) -> dict:
    """Tint descriptor for the aged tape."""
    return calculate_tape_yellow_tint(config)
