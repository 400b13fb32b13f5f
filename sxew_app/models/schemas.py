"""
Pydantic models for the calculator: the closed, typed input schema
(ParameterSet), the derived values (ResultSet) and the API request bodies.
Units, labels and defaults for each field live in
services/parameter_library.py and services/result_library.py.
"""
from pydantic import BaseModel, Field
from typing import Optional

from sxew_app.services.parameter_library import PARAMETER_DEFAULTS as D


class ParameterSet(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    # Production & feed rate
    annual_production: float = D["annual_production"]
    working_days: float = D["working_days"]
    working_hours: float = D["working_hours"]
    ore_grade: float = D["ore_grade"]
    total_recovery: float = D["total_recovery"]
    pls_concentration: float = D["pls_concentration"]

    # Heap / pad
    ore_density: float = D["ore_density"]
    heap_height: float = D["heap_height"]
    leach_cycle: float = D["leach_cycle"]
    evaporation: float = D["evaporation"]

    # Solvent extraction
    sx_recovery: float = D["sx_recovery"]
    oa_ratio: float = D["oa_ratio"]
    lean_organic_concentration: float = D["lean_organic_concentration"]
    organic_loss: float = D["organic_loss"]

    # Electrowinning
    delta_cu: float = D["delta_cu"]
    spent_electrolyte_concentration: float = D["spent_electrolyte_concentration"]
    cell_voltage: float = D["cell_voltage"]
    current_efficiency: float = D["current_efficiency"]

    # Acid balance
    acid_consumption: float = D["acid_consumption"]
    acid_density: float = D["acid_density"]
    agglo_acid_percent: float = D["agglo_acid_percent"]
    bleed_flow: float = D["bleed_flow"]
    bleed_acid_concentration: float = D["bleed_acid_concentration"]

    # Equipment sizing
    pls_pump_head: float = D["pls_pump_head"]
    raffinate_pump_head: float = D["raffinate_pump_head"]
    pump_efficiency: float = D["pump_efficiency"]
    motor_efficiency: float = D["motor_efficiency"]
    work_index: float = D["work_index"]
    feed_size: float = D["feed_size"]
    product_size: float = D["product_size"]
    pls_tank_residence: float = D["pls_tank_residence"]
    raffinate_tank_residence: float = D["raffinate_tank_residence"]

    # Economics
    pump_cost_per_kw: float = D["pump_cost_per_kw"]
    crusher_cost_per_kw: float = D["crusher_cost_per_kw"]
    rectifier_cost_per_kw: float = D["rectifier_cost_per_kw"]
    pad_cost_per_m2: float = D["pad_cost_per_m2"]
    tank_cost_per_m3: float = D["tank_cost_per_m3"]
    electricity_price: float = D["electricity_price"]
    acid_price: float = D["acid_price"]
    guar_rate: float = D["guar_rate"]
    guar_price: float = D["guar_price"]
    solvent_rate: float = D["solvent_rate"]
    solvent_price: float = D["solvent_price"]
    cobalt_rate: float = D["cobalt_rate"]
    cobalt_price: float = D["cobalt_price"]
    labor_count: float = D["labor_count"]
    avg_labor_cost: float = D["avg_labor_cost"]
    maintenance_rate: float = D["maintenance_rate"]


class ResultSet(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    p_hr_ton: float
    p_hr_kg: float
    annual_hours: float
    hourly_ore_feed_rate: float
    annual_ore: float

    total_ore_on_heap: float
    heap_volume: float
    required_heap_area: float
    annual_heap_volume: float
    leach_cycle_time: float
    e_heap: float

    q1: float
    q2: float
    q3: float
    c3: float
    q4: float
    c4: float
    q5: float
    c5: float
    q6: float
    c6: float
    q7: float
    c7: float
    q8: float
    c8: float
    q9: float
    c9: float
    q10: float
    q11: float
    c11: float
    q12: float
    c12: float
    q13: float
    q14: float
    q15: float
    q16: float
    q17: float
    q18: float
    q19: float
    q20: float

    pls_pump_power: float
    raffinate_pump_power: float
    specific_energy: float
    crusher_power: float
    total_current: float
    rectifier_power_dc: float
    rectifier_power_ac: float
    pls_tank_volume: float
    raffinate_tank_volume: float
    total_power_consumption: float

    capex_pumps: float
    capex_crusher: float
    capex_rectifier: float
    capex_pad: float
    capex_tanks: float
    total_capex: float
    annual_energy: float
    annual_acid: float
    annual_guar: float
    annual_solvent: float
    annual_cobalt: float
    opex_power: float
    opex_acid: float
    opex_guar: float
    opex_solvent: float
    opex_cobalt: float
    opex_reagents: float
    opex_labor: float
    opex_maintenance: float
    total_opex: float
    production_cost_per_ton: float


class CalculateRequest(BaseModel):
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    inputs: dict = Field(default_factory=dict)
    reagent_bases: Optional[dict] = Field(default=None, alias="reagentBases")

    model_config = {"populate_by_name": True}


class AnalysisRequest(BaseModel):
    model: Optional[str] = None
    language: str = "English"
