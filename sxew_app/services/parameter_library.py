"""
SX-EW heap leach calculator - input parameter library.

Every user-editable input is declared here once: the symbol shown in the
form and the help table, a label, its engineering unit, the default used on
reset, the allowed domain and the UI section (tab) it belongs to.
Percentages are stored as raw numbers (85 means 85 %).
"""

from typing import Dict, Any


SECTION_LABELS: Dict[str, str] = {
    "inputs": "Main Inputs",
    "pad": "Pad Design",
    "sx": "Solvent Extraction (SX)",
    "ew": "Electrowinning (EW)",
    "acid": "Acid Balance",
    "equipment": "Equipment Sizing",
    "economics": "Economics",
}

SECTION_ORDER = ["inputs", "pad", "sx", "ew", "acid", "equipment", "economics"]


PARAMETER_SPECS: Dict[str, Dict[str, Any]] = {
    # Production & feed rate
    "annual_production": {
        "symbol": "P", "label": "Annual Cathode Production", "unit": "t/yr",
        "default": 10000, "min": 0, "section": "inputs",
        "description": "Total copper cathode produced in one year",
    },
    "working_days": {
        "symbol": "wd", "label": "Working Days per Year", "unit": "d/yr",
        "default": 350, "min": 0, "max": 366, "section": "inputs",
        "description": "Number of plant operating days in a year",
    },
    "working_hours": {
        "symbol": "wh", "label": "Working Hours per Day", "unit": "h/d",
        "default": 24, "min": 0, "max": 24, "section": "inputs",
        "description": "Number of plant operating hours in a day",
    },
    "ore_grade": {
        "symbol": "oreGrade", "label": "Ore Grade", "unit": "%",
        "default": 0.6, "min": 0, "max": 100, "section": "inputs",
        "description": "Copper content of the ore stacked on the heap",
    },
    "total_recovery": {
        "symbol": "totalRecovery", "label": "Overall Copper Recovery", "unit": "%",
        "default": 80, "min": 0, "max": 100, "section": "inputs",
        "description": "Fraction of copper in the ore that ends up as cathode",
    },
    "pls_concentration": {
        "symbol": "C_PLS_test", "label": "PLS Copper Concentration (test)", "unit": "g/L",
        "default": 3.5, "min": 0, "section": "inputs",
        "description": "Copper concentration in pregnant leach solution from metallurgical testwork",
    },

    # Heap / pad design
    "ore_density": {
        "symbol": "oreDensity", "label": "Ore Bulk Density", "unit": "t/m³",
        "default": 1.6, "min": 0, "section": "pad",
        "description": "Bulk density of the crushed, stacked ore",
    },
    "heap_height": {
        "symbol": "heapHeight", "label": "Heap Height", "unit": "m",
        "default": 6, "min": 0, "section": "pad",
        "description": "Vertical height of the ore stack on the pad",
    },
    "leach_cycle": {
        "symbol": "leachCycle", "label": "Leach Cycle", "unit": "d",
        "default": 90, "min": 0, "section": "pad",
        "description": "Days each ore lift stays under irrigation",
    },
    "evaporation": {
        "symbol": "A_evap", "label": "Heap Evaporation", "unit": "%",
        "default": 10, "min": 0, "max": 100, "section": "pad",
        "description": "Share of the raffinate flow lost to evaporation on the heap surface",
    },

    # Solvent extraction
    "sx_recovery": {
        "symbol": "R", "label": "SX Copper Extraction", "unit": "%",
        "default": 85, "min": 0, "max": 100, "section": "sx",
        "description": "Share of the PLS copper transferred into the organic phase",
    },
    "oa_ratio": {
        "symbol": "OA_Ratio", "label": "O:A Ratio", "unit": "-",
        "default": 1.2, "min": 0, "section": "sx",
        "description": "Volumetric ratio of organic to aqueous phase in the mixer-settlers",
    },
    "lean_organic_concentration": {
        "symbol": "C6", "label": "Lean Organic Copper", "unit": "g/L",
        "default": 0, "min": 0, "section": "sx",
        "description": "Copper left on the stripped organic returning to extraction",
    },
    "organic_loss": {
        "symbol": "organicLoss", "label": "Organic Loss in Stripping", "unit": "%",
        "default": 0, "min": 0, "max": 100, "section": "sx",
        "description": "Share of the loaded organic not returned as lean organic",
    },

    # Electrowinning
    "delta_cu": {
        "symbol": "Delta_Cu", "label": "EW Copper Concentration Drop", "unit": "g/L",
        "default": 10, "min": 0, "section": "ew",
        "description": "Copper difference between rich and spent electrolyte",
    },
    "spent_electrolyte_concentration": {
        "symbol": "C8", "label": "Spent Electrolyte Copper", "unit": "g/L",
        "default": 35, "min": 0, "section": "ew",
        "description": "Copper concentration of electrolyte leaving the tankhouse",
    },
    "cell_voltage": {
        "symbol": "cellVoltage", "label": "Cell Voltage", "unit": "V",
        "default": 2.0, "min": 0, "section": "ew",
        "description": "Operating voltage across one electrowinning cell",
    },
    "current_efficiency": {
        "symbol": "currentEfficiency", "label": "Current Efficiency", "unit": "%",
        "default": 90, "min": 0, "max": 100, "section": "ew",
        "description": "Share of the DC current that deposits copper",
    },

    # Acid balance
    "acid_consumption": {
        "symbol": "AcidConsumption", "label": "Acid Consumption", "unit": "kg/t ore",
        "default": 12, "min": 0, "section": "acid",
        "description": "Sulphuric acid consumed per tonne of ore",
    },
    "acid_density": {
        "symbol": "AcidDensity", "label": "Acid Density", "unit": "t/m³",
        "default": 1.84, "min": 0, "section": "acid",
        "description": "Density of the concentrated acid",
    },
    "agglo_acid_percent": {
        "symbol": "AggloAcidPercent", "label": "Acid to Agglomeration", "unit": "%",
        "default": 25, "min": 0, "max": 100, "section": "acid",
        "description": "Share of the acid added in the agglomeration drum instead of the raffinate",
    },
    "bleed_flow": {
        "symbol": "Q9", "label": "Electrolyte Bleed Flow", "unit": "m³/h",
        "default": 1, "min": 0, "section": "acid",
        "description": "Electrolyte bled from the tankhouse to control impurities",
    },
    "bleed_acid_concentration": {
        "symbol": "A_con9", "label": "Bleed Acid Concentration", "unit": "g/L",
        "default": 150, "min": 0, "section": "acid",
        "description": "Free acid in the electrolyte bleed",
    },

    # Equipment sizing
    "pls_pump_head": {
        "symbol": "H_PLS", "label": "PLS Pump Head", "unit": "m",
        "default": 30, "min": 0, "section": "equipment",
        "description": "Total dynamic head of the PLS pumps",
    },
    "raffinate_pump_head": {
        "symbol": "H_raff", "label": "Raffinate Pump Head", "unit": "m",
        "default": 40, "min": 0, "section": "equipment",
        "description": "Total dynamic head of the raffinate pumps to the heap",
    },
    "pump_efficiency": {
        "symbol": "η_pump", "label": "Pump Efficiency", "unit": "%",
        "default": 75, "min": 0, "max": 100, "section": "equipment",
        "description": "Hydraulic efficiency of the solution pumps",
    },
    "motor_efficiency": {
        "symbol": "η_motor", "label": "Motor / Rectifier Efficiency", "unit": "%",
        "default": 95, "min": 0, "max": 100, "section": "equipment",
        "description": "Electrical efficiency of pump motors and the rectifier",
    },
    "work_index": {
        "symbol": "Wi", "label": "Bond Work Index", "unit": "kWh/t",
        "default": 14, "min": 0, "section": "equipment",
        "description": "Bond work index of the ore",
    },
    "feed_size": {
        "symbol": "F80", "label": "Crusher Feed Size (F80)", "unit": "µm",
        "default": 150000, "min": 0, "section": "equipment",
        "description": "80 % passing size of the crusher feed",
    },
    "product_size": {
        "symbol": "P80", "label": "Crusher Product Size (P80)", "unit": "µm",
        "default": 12500, "min": 0, "section": "equipment",
        "description": "80 % passing size of the crushed product",
    },
    "pls_tank_residence": {
        "symbol": "t_PLS", "label": "PLS Pond Residence Time", "unit": "h",
        "default": 8, "min": 0, "section": "equipment",
        "description": "Hold-up time of the PLS pond or tank",
    },
    "raffinate_tank_residence": {
        "symbol": "t_raff", "label": "Raffinate Pond Residence Time", "unit": "h",
        "default": 8, "min": 0, "section": "equipment",
        "description": "Hold-up time of the raffinate pond or tank",
    },

    # Economics
    "pump_cost_per_kw": {
        "symbol": "c_pump", "label": "Pump Cost", "unit": "$/kW",
        "default": 1500, "min": 0, "section": "economics",
        "description": "Installed cost of pumping capacity",
    },
    "crusher_cost_per_kw": {
        "symbol": "c_crusher", "label": "Crusher Cost", "unit": "$/kW",
        "default": 2500, "min": 0, "section": "economics",
        "description": "Installed cost of crushing capacity",
    },
    "rectifier_cost_per_kw": {
        "symbol": "c_rectifier", "label": "Rectifier Cost", "unit": "$/kW",
        "default": 400, "min": 0, "section": "economics",
        "description": "Installed cost of rectifier capacity",
    },
    "pad_cost_per_m2": {
        "symbol": "c_pad", "label": "Leach Pad Cost", "unit": "$/m²",
        "default": 25, "min": 0, "section": "economics",
        "description": "Lined pad construction cost",
    },
    "tank_cost_per_m3": {
        "symbol": "c_tank", "label": "Tank / Pond Cost", "unit": "$/m³",
        "default": 600, "min": 0, "section": "economics",
        "description": "Solution storage cost per unit volume",
    },
    "electricity_price": {
        "symbol": "c_power", "label": "Electricity Price", "unit": "$/kWh",
        "default": 0.08, "min": 0, "section": "economics",
        "description": "Average electricity tariff",
    },
    "acid_price": {
        "symbol": "c_acid", "label": "Acid Price", "unit": "$/t",
        "default": 150, "min": 0, "section": "economics",
        "description": "Delivered sulphuric acid price",
    },
    "guar_rate": {
        "symbol": "r_guar", "label": "Guar / Flocculant Consumption", "unit": "kg/basis unit",
        "default": 0.25, "min": 0, "section": "economics",
        "description": "Guar or flocculant used per unit of its consumption basis",
    },
    "guar_price": {
        "symbol": "c_guar", "label": "Guar / Flocculant Price", "unit": "$/kg",
        "default": 3.0, "min": 0, "section": "economics",
        "description": "Delivered guar or flocculant price",
    },
    "solvent_rate": {
        "symbol": "r_solvent", "label": "Solvent Make-up Consumption", "unit": "kg/basis unit",
        "default": 2.5, "min": 0, "section": "economics",
        "description": "Extractant and diluent make-up per unit of its consumption basis",
    },
    "solvent_price": {
        "symbol": "c_solvent", "label": "Solvent Price", "unit": "$/kg",
        "default": 4.0, "min": 0, "section": "economics",
        "description": "Blended extractant and diluent price",
    },
    "cobalt_rate": {
        "symbol": "r_cobalt", "label": "Cobalt Sulphate Consumption", "unit": "kg/basis unit",
        "default": 0.4, "min": 0, "section": "economics",
        "description": "Cobalt sulphate added to the electrolyte per unit of its consumption basis",
    },
    "cobalt_price": {
        "symbol": "c_cobalt", "label": "Cobalt Sulphate Price", "unit": "$/kg",
        "default": 8.0, "min": 0, "section": "economics",
        "description": "Delivered cobalt sulphate price",
    },
    "labor_count": {
        "symbol": "N_labor", "label": "Workforce", "unit": "persons",
        "default": 60, "min": 0, "section": "economics",
        "description": "Number of employees on site",
    },
    "avg_labor_cost": {
        "symbol": "c_labor", "label": "Average Labour Cost", "unit": "$/yr per person",
        "default": 30000, "min": 0, "section": "economics",
        "description": "Loaded annual cost per employee",
    },
    "maintenance_rate": {
        "symbol": "r_maint", "label": "Maintenance Rate", "unit": "% of CAPEX",
        "default": 3, "min": 0, "max": 100, "section": "economics",
        "description": "Annual maintenance cost as a share of total CAPEX",
    },
}


PARAMETER_DEFAULTS: Dict[str, float] = {
    key: float(spec["default"]) for key, spec in PARAMETER_SPECS.items()
}

SYMBOL_TO_PARAMETER: Dict[str, str] = {
    spec["symbol"]: key for key, spec in PARAMETER_SPECS.items()
}


def resolve_parameter_name(key: str):
    """Accept a field name, a camelCase field name or a form symbol."""
    if key in PARAMETER_SPECS:
        return key
    if key in SYMBOL_TO_PARAMETER:
        return SYMBOL_TO_PARAMETER[key]
    snake = "".join(f"_{ch.lower()}" if ch.isupper() else ch for ch in key)
    if snake in PARAMETER_SPECS:
        return snake
    return None


def get_parameters_by_section() -> list:
    sections = []
    for section in SECTION_ORDER:
        fields = [
            {"name": key, **spec}
            for key, spec in PARAMETER_SPECS.items()
            if spec["section"] == section
        ]
        sections.append({
            "key": section,
            "label": SECTION_LABELS[section],
            "fields": fields,
        })
    return sections


def get_help_rows() -> list:
    return [
        {"symbol": spec["symbol"], "description": spec["description"], "unit": spec["unit"]}
        for spec in PARAMETER_SPECS.values()
    ]
