"""
Deterministic process model for a copper heap leach / SX-EW plant.

evaluate() derives every stream, sizing figure and cost from one
ParameterSet in a single feed-forward pass. Stages run in a fixed order and
each stage may only read values produced by the stages before it. Any ratio
with a zero or negative denominator evaluates to 0 and the zero propagates;
the model never raises for ill-posed inputs.

Stream numbering (20-stream circuit):

     1 ore to agglomeration          11 raffinate from SX
     2 evaporation from heap         12 raffinate to heap (11 + 19)
     3 irrigation to heap (12 + 13)  13 acid to raffinate
     4 PLS to SX                     14 acid carried by bleed
     5 loaded organic                15 organic make-up (5 - 6)
     6 lean organic                  16 cathode copper
     7 rich electrolyte              17 total fresh water (19 + 10)
     8 spent electrolyte             18 copper in bleed
     9 electrolyte bleed             19 make-up water to raffinate
    10 water make-up to EW           20 acid to agglomeration
"""

import logging
import math
from functools import partial
from types import MappingProxyType
from typing import Optional

from sxew_app.models.schemas import ParameterSet, ResultSet
from sxew_app.services.economics import (
    DEFAULT_REAGENT_BASES,
    ECONOMICS_REQUIRES,
    ECONOMICS_PROVIDES,
    calculate_economics,
)

logger = logging.getLogger(__name__)

G = 9.81
WATER_DENSITY = 1000
FARADAY = 96485
CU_MOLAR_MASS = 63.546
CU_VALENCE = 2


def safe_div(numerator: float, denominator: float) -> float:
    if not denominator > 0:
        return 0.0
    return numerator / denominator


def pump_power(flow_m3h: float, head_m: float, pump_eff_pct: float, motor_eff_pct: float) -> float:
    """Shaft-to-grid pump power in kW for a flow in m³/h against a head in m."""
    hydraulic = flow_m3h / 3600 * head_m * G * WATER_DENSITY
    return safe_div(hydraulic, (pump_eff_pct / 100) * (motor_eff_pct / 100) * 1000)


def bond_specific_energy(work_index: float, p80_um: float, f80_um: float) -> float:
    """Bond's law, kWh/t. Sizes are 80 % passing in micrometres."""
    if not (p80_um > 0 and f80_um > 0):
        return 0.0
    return work_index * 10 * (1 / math.sqrt(p80_um) - 1 / math.sqrt(f80_um))


def faraday_current(copper_kg_per_h: float, current_eff_pct: float) -> float:
    """Total tankhouse current in amperes for a copper deposition rate."""
    copper_g_per_s = copper_kg_per_h * 1000 / 3600
    return safe_div(copper_g_per_s * CU_VALENCE * FARADAY, CU_MOLAR_MASS * current_eff_pct / 100)


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def calculate_production(p: ParameterSet, r) -> dict:
    wd = p.working_days
    wh = p.working_hours

    p_hr_ton = safe_div(p.annual_production, wd * wh) if wd > 0 and wh > 0 else 0.0

    head_fraction = (p.ore_grade / 100) * (p.total_recovery / 100)
    if wd > 0 and wh > 0 and head_fraction > 0:
        hourly_ore = safe_div(p.annual_production, wd * head_fraction * wh)
    else:
        hourly_ore = 0.0

    return {
        "p_hr_ton": p_hr_ton,
        "p_hr_kg": p_hr_ton * 1000,
        "annual_hours": wd * wh,
        "hourly_ore_feed_rate": hourly_ore,
        "annual_ore": hourly_ore * wh * wd,
    }


def calculate_heap(p: ParameterSet, r) -> dict:
    total_ore_on_heap = r["hourly_ore_feed_rate"] * p.working_hours * p.leach_cycle

    if p.heap_height > 0 and p.ore_density > 0:
        required_area = safe_div(total_ore_on_heap, p.heap_height * p.ore_density)
    else:
        required_area = 0.0

    return {
        "total_ore_on_heap": total_ore_on_heap,
        "heap_volume": safe_div(total_ore_on_heap, p.ore_density),
        "required_heap_area": required_area,
        "annual_heap_volume": safe_div(r["annual_ore"], p.ore_density),
        "leach_cycle_time": p.leach_cycle,
    }


def calculate_mass_balance(p: ParameterSet, r) -> dict:
    recovery = p.sx_recovery / 100

    # PLS flow closes the copper balance against the production target
    c4 = p.pls_concentration
    q4 = safe_div(r["p_hr_kg"], c4 * recovery) if c4 > 0 and recovery > 0 else 0.0

    q11 = q4
    c11 = (1 - recovery) * c4

    e_heap = (p.evaporation / 100) * q11
    q19 = e_heap
    q12 = q11 + q19
    c12 = safe_div(q11 * c11, q12)

    q5 = q4 * p.oa_ratio
    q6 = q5 * (1 - p.organic_loss / 100)
    c6 = p.lean_organic_concentration
    c5 = safe_div(recovery * c4 * q4 + c6 * q6, q5)

    q8 = safe_div(r["p_hr_kg"], p.delta_cu)
    c8 = p.spent_electrolyte_concentration
    q7 = q8 + q5 - q6
    c7 = safe_div(q8 * c8 + q5 * c5 - q6 * c6, q7)

    q9 = p.bleed_flow
    c9 = c8
    q10 = q9

    return {
        "e_heap": e_heap,
        "q1": r["hourly_ore_feed_rate"],
        "q2": e_heap,
        "q4": q4,
        "c4": c4,
        "q5": q5,
        "c5": c5,
        "q6": q6,
        "c6": c6,
        "q7": q7,
        "c7": c7,
        "q8": q8,
        "c8": c8,
        "q9": q9,
        "c9": c9,
        "q10": q10,
        "q11": q11,
        "c11": c11,
        "q12": q12,
        "c12": c12,
        "q15": q5 - q6,
        "q16": r["p_hr_ton"],
        "q17": q19 + q10,
        "q18": q9 * c9,
        "q19": q19,
    }


def calculate_acid_balance(p: ParameterSet, r) -> dict:
    agglo_fraction = p.agglo_acid_percent / 100
    acid_kg_per_h = p.acid_consumption * r["hourly_ore_feed_rate"]

    if p.acid_density > 0:
        acid_volume_factor = p.acid_density * 1000
        q13 = acid_kg_per_h * (1 - agglo_fraction) / acid_volume_factor
        q20 = acid_kg_per_h * agglo_fraction / acid_volume_factor
        q14 = (r["q9"] * p.bleed_acid_concentration) / acid_volume_factor
    else:
        q13 = q20 = q14 = 0.0

    q3 = r["q12"] + q13

    return {
        "q13": q13,
        "q14": q14,
        "q20": q20,
        "q3": q3,
        "c3": safe_div(r["q12"] * r["c12"], q3),
    }


def calculate_equipment(p: ParameterSet, r) -> dict:
    pls_pump = pump_power(r["q4"], p.pls_pump_head, p.pump_efficiency, p.motor_efficiency)
    raff_pump = pump_power(r["q12"], p.raffinate_pump_head, p.pump_efficiency, p.motor_efficiency)

    specific_energy = bond_specific_energy(p.work_index, p.product_size, p.feed_size)
    crusher = specific_energy * r["hourly_ore_feed_rate"]

    current = faraday_current(r["p_hr_kg"], p.current_efficiency)
    rectifier_dc = current * p.cell_voltage / 1000
    rectifier_ac = safe_div(rectifier_dc, p.motor_efficiency / 100)

    return {
        "pls_pump_power": pls_pump,
        "raffinate_pump_power": raff_pump,
        "specific_energy": specific_energy,
        "crusher_power": crusher,
        "total_current": current,
        "rectifier_power_dc": rectifier_dc,
        "rectifier_power_ac": rectifier_ac,
        "pls_tank_volume": r["q4"] * p.pls_tank_residence,
        "raffinate_tank_volume": r["q11"] * p.raffinate_tank_residence,
        "total_power_consumption": pls_pump + raff_pump + crusher + rectifier_ac,
    }


# name, function, keys read from earlier stages, keys produced
STAGES: list = [
    (
        "production",
        calculate_production,
        (),
        ("p_hr_ton", "p_hr_kg", "annual_hours", "hourly_ore_feed_rate", "annual_ore"),
    ),
    (
        "heap",
        calculate_heap,
        ("hourly_ore_feed_rate", "annual_ore"),
        ("total_ore_on_heap", "heap_volume", "required_heap_area", "annual_heap_volume", "leach_cycle_time"),
    ),
    (
        "mass_balance",
        calculate_mass_balance,
        ("p_hr_kg", "p_hr_ton", "hourly_ore_feed_rate"),
        ("e_heap", "q1", "q2", "q4", "c4", "q5", "c5", "q6", "c6", "q7", "c7", "q8", "c8",
         "q9", "c9", "q10", "q11", "c11", "q12", "c12", "q15", "q16", "q17", "q18", "q19"),
    ),
    (
        "acid_balance",
        calculate_acid_balance,
        ("hourly_ore_feed_rate", "q9", "q12", "c12"),
        ("q13", "q14", "q20", "q3", "c3"),
    ),
    (
        "equipment",
        calculate_equipment,
        ("q4", "q11", "q12", "p_hr_kg", "hourly_ore_feed_rate"),
        ("pls_pump_power", "raffinate_pump_power", "specific_energy", "crusher_power", "total_current",
         "rectifier_power_dc", "rectifier_power_ac", "pls_tank_volume", "raffinate_tank_volume",
         "total_power_consumption"),
    ),
    (
        "economics",
        calculate_economics,
        ECONOMICS_REQUIRES,
        ECONOMICS_PROVIDES,
    ),
]


def check_stage_order(stages: list) -> None:
    """Raise if a stage reads a value that no earlier stage produced."""
    available: set = set()
    for name, _fn, requires, provides in stages:
        missing = [k for k in requires if k not in available]
        if missing:
            raise ValueError(f"Stage '{name}' depends on values not produced earlier: {missing}")
        duplicated = [k for k in provides if k in available]
        if duplicated:
            raise ValueError(f"Stage '{name}' redefines values from an earlier stage: {duplicated}")
        available.update(provides)


check_stage_order(STAGES)


def evaluate(params: ParameterSet, reagent_bases: Optional[dict] = None) -> ResultSet:
    bases = {**DEFAULT_REAGENT_BASES, **(reagent_bases or {})}
    overrides = {"economics": partial(calculate_economics, reagent_bases=bases)}
    results: dict = {}

    for name, fn, requires, provides in STAGES:
        # a stage sees only the values it declares
        visible = MappingProxyType({k: results[k] for k in requires})
        stage_values = overrides.get(name, fn)(params, visible)
        if set(stage_values) != set(provides):
            raise RuntimeError(f"Stage '{name}' returned unexpected keys: {sorted(set(stage_values) ^ set(provides))}")
        results.update(stage_values)
        logger.debug("Stage %s produced %d values", name, len(stage_values))

    return ResultSet(**results)
