"""
SX-EW heap leach calculator - derived quantity library.

Describes every value the process model produces: its label, unit, the
section (tab) it is reported under and the number of decimals used when it
is displayed. Order here is the order of the report.
"""

from typing import Dict, Any


RESULT_SECTION_LABELS: Dict[str, str] = {
    "production": "Production & Feed Rate",
    "pad": "Heap / Pad Sizing",
    "streams": "Stream Table",
    "sx": "Solvent Extraction (SX)",
    "ew": "Electrowinning (EW)",
    "acid": "Acid Balance",
    "equipment": "Equipment Sizing",
    "economics": "Economics",
}

RESULT_SPECS: Dict[str, Dict[str, Any]] = {
    # Production & feed rate
    "p_hr_ton": {"symbol": "P_hr", "label": "Hourly Cathode Production", "unit": "t/h", "section": "production", "decimals": 3},
    "p_hr_kg": {"symbol": "P_hr_kg", "label": "Hourly Cathode Production", "unit": "kg/h", "section": "production", "decimals": 1},
    "annual_hours": {"symbol": "H_yr", "label": "Operating Hours per Year", "unit": "h/yr", "section": "production", "decimals": 0},
    "hourly_ore_feed_rate": {"symbol": "Mh_ore", "label": "Hourly Ore Feed Rate", "unit": "t/h", "section": "production", "decimals": 2},
    "annual_ore": {"symbol": "M_ore", "label": "Annual Ore Stacked", "unit": "t/yr", "section": "production", "decimals": 0},

    # Heap / ore sizing
    "total_ore_on_heap": {"symbol": "M_heap", "label": "Ore Under Leach", "unit": "t", "section": "pad", "decimals": 0},
    "heap_volume": {"symbol": "V_heap", "label": "Heap Volume Under Leach", "unit": "m³", "section": "pad", "decimals": 0},
    "required_heap_area": {"symbol": "A_pad", "label": "Required Pad Area", "unit": "m²", "section": "pad", "decimals": 0},
    "annual_heap_volume": {"symbol": "V_yr", "label": "Annual Heap Volume", "unit": "m³/yr", "section": "pad", "decimals": 0},
    "leach_cycle_time": {"symbol": "T_leach", "label": "Leach Cycle Time", "unit": "d", "section": "pad", "decimals": 1},
    "e_heap": {"symbol": "E_heap", "label": "Heap Evaporation", "unit": "m³/h", "section": "pad", "decimals": 2},

    # Streams
    "q1": {"symbol": "Q1", "label": "Ore to Agglomeration", "unit": "t/h", "section": "streams", "decimals": 2},
    "q2": {"symbol": "Q2", "label": "Evaporation from Heap", "unit": "m³/h", "section": "streams", "decimals": 2},
    "q3": {"symbol": "Q3", "label": "Irrigation Solution to Heap", "unit": "m³/h", "section": "streams", "decimals": 2},
    "c3": {"symbol": "C3", "label": "Irrigation Solution Copper", "unit": "g/L", "section": "streams", "decimals": 3},
    "q4": {"symbol": "Q4", "label": "PLS to SX", "unit": "m³/h", "section": "sx", "decimals": 2},
    "c4": {"symbol": "C4", "label": "PLS Copper", "unit": "g/L", "section": "sx", "decimals": 2},
    "q5": {"symbol": "Q5", "label": "Loaded Organic", "unit": "m³/h", "section": "sx", "decimals": 2},
    "c5": {"symbol": "C5", "label": "Loaded Organic Copper", "unit": "g/L", "section": "sx", "decimals": 2},
    "q6": {"symbol": "Q6", "label": "Lean Organic", "unit": "m³/h", "section": "sx", "decimals": 2},
    "c6": {"symbol": "C6", "label": "Lean Organic Copper", "unit": "g/L", "section": "sx", "decimals": 2},
    "q7": {"symbol": "Q7", "label": "Rich Electrolyte", "unit": "m³/h", "section": "ew", "decimals": 2},
    "c7": {"symbol": "C7", "label": "Rich Electrolyte Copper", "unit": "g/L", "section": "ew", "decimals": 2},
    "q8": {"symbol": "Q8", "label": "Spent Electrolyte", "unit": "m³/h", "section": "ew", "decimals": 2},
    "c8": {"symbol": "C8", "label": "Spent Electrolyte Copper", "unit": "g/L", "section": "ew", "decimals": 2},
    "q9": {"symbol": "Q9", "label": "Electrolyte Bleed", "unit": "m³/h", "section": "ew", "decimals": 2},
    "c9": {"symbol": "C9", "label": "Bleed Copper", "unit": "g/L", "section": "ew", "decimals": 2},
    "q10": {"symbol": "Q10", "label": "Water Make-up to EW", "unit": "m³/h", "section": "ew", "decimals": 2},
    "q11": {"symbol": "Q11", "label": "Raffinate from SX", "unit": "m³/h", "section": "sx", "decimals": 2},
    "c11": {"symbol": "C11", "label": "Raffinate Copper", "unit": "g/L", "section": "sx", "decimals": 3},
    "q12": {"symbol": "Q12", "label": "Raffinate to Heap", "unit": "m³/h", "section": "streams", "decimals": 2},
    "c12": {"symbol": "C12", "label": "Raffinate to Heap Copper", "unit": "g/L", "section": "streams", "decimals": 3},
    "q13": {"symbol": "Q13", "label": "Acid to Raffinate", "unit": "m³/h", "section": "acid", "decimals": 4},
    "q14": {"symbol": "Q14", "label": "Acid Carried by Bleed", "unit": "m³/h", "section": "acid", "decimals": 4},
    "q15": {"symbol": "Q15", "label": "Organic Make-up", "unit": "m³/h", "section": "sx", "decimals": 4},
    "q16": {"symbol": "Q16", "label": "Cathode Copper", "unit": "t/h", "section": "ew", "decimals": 3},
    "q17": {"symbol": "Q17", "label": "Total Fresh Water", "unit": "m³/h", "section": "streams", "decimals": 2},
    "q18": {"symbol": "Q18", "label": "Copper in Bleed", "unit": "kg/h", "section": "ew", "decimals": 2},
    "q19": {"symbol": "Q19", "label": "Make-up Water to Raffinate", "unit": "m³/h", "section": "streams", "decimals": 2},
    "q20": {"symbol": "Q20", "label": "Acid to Agglomeration", "unit": "m³/h", "section": "acid", "decimals": 4},

    # Equipment sizing
    "pls_pump_power": {"symbol": "P_pump_PLS", "label": "PLS Pump Power", "unit": "kW", "section": "equipment", "decimals": 1},
    "raffinate_pump_power": {"symbol": "P_pump_raff", "label": "Raffinate Pump Power", "unit": "kW", "section": "equipment", "decimals": 1},
    "specific_energy": {"symbol": "W", "label": "Crushing Specific Energy", "unit": "kWh/t", "section": "equipment", "decimals": 3},
    "crusher_power": {"symbol": "P_crusher", "label": "Crusher Power", "unit": "kW", "section": "equipment", "decimals": 1},
    "total_current": {"symbol": "I", "label": "Tankhouse Current", "unit": "A", "section": "equipment", "decimals": 0},
    "rectifier_power_dc": {"symbol": "P_DC", "label": "Rectifier DC Power", "unit": "kW", "section": "equipment", "decimals": 1},
    "rectifier_power_ac": {"symbol": "P_AC", "label": "Rectifier AC Power", "unit": "kW", "section": "equipment", "decimals": 1},
    "pls_tank_volume": {"symbol": "V_PLS", "label": "PLS Pond Volume", "unit": "m³", "section": "equipment", "decimals": 0},
    "raffinate_tank_volume": {"symbol": "V_raff", "label": "Raffinate Pond Volume", "unit": "m³", "section": "equipment", "decimals": 0},
    "total_power_consumption": {"symbol": "P_total", "label": "Total Power Demand", "unit": "kW", "section": "equipment", "decimals": 1},

    # Economics
    "capex_pumps": {"symbol": "CAPEX_pumps", "label": "Pumps CAPEX", "unit": "$", "section": "economics", "decimals": 0},
    "capex_crusher": {"symbol": "CAPEX_crusher", "label": "Crusher CAPEX", "unit": "$", "section": "economics", "decimals": 0},
    "capex_rectifier": {"symbol": "CAPEX_rectifier", "label": "Rectifier CAPEX", "unit": "$", "section": "economics", "decimals": 0},
    "capex_pad": {"symbol": "CAPEX_pad", "label": "Leach Pad CAPEX", "unit": "$", "section": "economics", "decimals": 0},
    "capex_tanks": {"symbol": "CAPEX_tanks", "label": "Tanks & Ponds CAPEX", "unit": "$", "section": "economics", "decimals": 0},
    "total_capex": {"symbol": "CAPEX", "label": "Total CAPEX", "unit": "$", "section": "economics", "decimals": 0},
    "annual_energy": {"symbol": "E_yr", "label": "Annual Energy", "unit": "kWh/yr", "section": "economics", "decimals": 0},
    "annual_acid": {"symbol": "M_acid", "label": "Annual Acid Consumption", "unit": "t/yr", "section": "economics", "decimals": 0},
    "annual_guar": {"symbol": "M_guar", "label": "Annual Guar / Flocculant", "unit": "kg/yr", "section": "economics", "decimals": 0},
    "annual_solvent": {"symbol": "M_solvent", "label": "Annual Solvent Make-up", "unit": "kg/yr", "section": "economics", "decimals": 0},
    "annual_cobalt": {"symbol": "M_cobalt", "label": "Annual Cobalt Sulphate", "unit": "kg/yr", "section": "economics", "decimals": 0},
    "opex_power": {"symbol": "OPEX_power", "label": "Power OPEX", "unit": "$/yr", "section": "economics", "decimals": 0},
    "opex_acid": {"symbol": "OPEX_acid", "label": "Acid OPEX", "unit": "$/yr", "section": "economics", "decimals": 0},
    "opex_guar": {"symbol": "OPEX_guar", "label": "Guar / Flocculant OPEX", "unit": "$/yr", "section": "economics", "decimals": 0},
    "opex_solvent": {"symbol": "OPEX_solvent", "label": "Solvent Make-up OPEX", "unit": "$/yr", "section": "economics", "decimals": 0},
    "opex_cobalt": {"symbol": "OPEX_cobalt", "label": "Cobalt OPEX", "unit": "$/yr", "section": "economics", "decimals": 0},
    "opex_reagents": {"symbol": "OPEX_reagents", "label": "Reagents OPEX", "unit": "$/yr", "section": "economics", "decimals": 0},
    "opex_labor": {"symbol": "OPEX_labor", "label": "Labour OPEX", "unit": "$/yr", "section": "economics", "decimals": 0},
    "opex_maintenance": {"symbol": "OPEX_maint", "label": "Maintenance OPEX", "unit": "$/yr", "section": "economics", "decimals": 0},
    "total_opex": {"symbol": "OPEX", "label": "Total OPEX", "unit": "$/yr", "section": "economics", "decimals": 0},
    "production_cost_per_ton": {"symbol": "C_unit", "label": "Production Cost", "unit": "$/t Cu", "section": "economics", "decimals": 2},
}


SUMMARY_KEYS = [
    "required_heap_area",
    "annual_heap_volume",
    "leach_cycle_time",
    "p_hr_ton",
    "q4",
    "q12",
    "q5",
    "q8",
    "total_power_consumption",
    "total_capex",
    "total_opex",
    "production_cost_per_ton",
]

# Fields handed to the narrative analysis prompt
NARRATIVE_KEYS = [
    "total_capex",
    "total_opex",
    "production_cost_per_ton",
    "total_power_consumption",
    "required_heap_area",
    "hourly_ore_feed_rate",
]


def format_result(key: str, value: float) -> str:
    decimals = RESULT_SPECS[key]["decimals"]
    return f"{value:,.{decimals}f}"


def build_summary(results: dict) -> dict:
    summary = {}
    for key in SUMMARY_KEYS:
        spec = RESULT_SPECS[key]
        summary[key] = {
            "label": spec["label"],
            "value": results[key],
            "display": format_result(key, results[key]),
            "unit": spec["unit"],
        }
    return summary


def build_sections(results: dict) -> dict:
    sections: dict = {}
    for key, spec in RESULT_SPECS.items():
        sections.setdefault(spec["section"], []).append({
            "name": key,
            "symbol": spec["symbol"],
            "label": spec["label"],
            "value": results[key],
            "display": format_result(key, results[key]),
            "unit": spec["unit"],
        })
    return sections
