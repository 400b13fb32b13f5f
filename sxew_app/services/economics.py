import logging

logger = logging.getLogger(__name__)

REAGENT_BASES = ("ore", "cathode", "pad_area")

BASIS_LABELS = {
    "ore": "t ore",
    "cathode": "t cathode",
    "pad_area": "m² pad",
}

# Consumption basis per reagent. Acid is always per tonne of ore.
DEFAULT_REAGENT_BASES = {
    "guar": "cathode",
    "solvent": "cathode",
    "cobalt": "cathode",
}

ECONOMICS_REQUIRES = (
    "pls_pump_power", "raffinate_pump_power", "crusher_power", "rectifier_power_ac",
    "required_heap_area", "pls_tank_volume", "raffinate_tank_volume",
    "total_power_consumption", "annual_hours", "annual_ore",
)

ECONOMICS_PROVIDES = (
    "capex_pumps", "capex_crusher", "capex_rectifier", "capex_pad", "capex_tanks", "total_capex",
    "annual_energy", "annual_acid", "annual_guar", "annual_solvent", "annual_cobalt",
    "opex_power", "opex_acid", "opex_guar", "opex_solvent", "opex_cobalt", "opex_reagents",
    "opex_labor", "opex_maintenance", "total_opex", "production_cost_per_ton",
)


def _basis_quantity(basis: str, p, r) -> float:
    if basis == "ore":
        return r["annual_ore"]
    if basis == "cathode":
        return p.annual_production
    if basis == "pad_area":
        return r["required_heap_area"]
    raise KeyError(basis)


def normalize_reagent_bases(reagent_bases) -> dict:
    bases = dict(DEFAULT_REAGENT_BASES)
    for reagent, basis in (reagent_bases or {}).items():
        if reagent not in DEFAULT_REAGENT_BASES:
            logger.warning("Ignoring consumption basis for unknown reagent '%s'", reagent)
            continue
        if basis not in REAGENT_BASES:
            logger.warning(
                "Unknown consumption basis '%s' for %s, keeping '%s'",
                basis, reagent, DEFAULT_REAGENT_BASES[reagent],
            )
            continue
        bases[reagent] = basis
    return bases


def calculate_capex(p, r) -> dict:
    capex = {
        "capex_pumps": (r["pls_pump_power"] + r["raffinate_pump_power"]) * p.pump_cost_per_kw,
        "capex_crusher": r["crusher_power"] * p.crusher_cost_per_kw,
        "capex_rectifier": r["rectifier_power_ac"] * p.rectifier_cost_per_kw,
        "capex_pad": r["required_heap_area"] * p.pad_cost_per_m2,
        "capex_tanks": (r["pls_tank_volume"] + r["raffinate_tank_volume"]) * p.tank_cost_per_m3,
    }
    capex["total_capex"] = (
        capex["capex_pumps"]
        + capex["capex_crusher"]
        + capex["capex_rectifier"]
        + capex["capex_pad"]
        + capex["capex_tanks"]
    )
    return capex


def calculate_opex(p, r, total_capex: float, reagent_bases: dict) -> dict:
    bases = normalize_reagent_bases(reagent_bases)

    annual_energy = r["total_power_consumption"] * r["annual_hours"]
    opex_power = annual_energy * p.electricity_price

    annual_acid = p.acid_consumption * r["annual_ore"] / 1000
    annual_guar = p.guar_rate * _basis_quantity(bases["guar"], p, r)
    annual_solvent = p.solvent_rate * _basis_quantity(bases["solvent"], p, r)
    annual_cobalt = p.cobalt_rate * _basis_quantity(bases["cobalt"], p, r)

    opex_acid = annual_acid * p.acid_price
    opex_guar = annual_guar * p.guar_price
    opex_solvent = annual_solvent * p.solvent_price
    opex_cobalt = annual_cobalt * p.cobalt_price
    opex_reagents = opex_acid + opex_guar + opex_solvent + opex_cobalt

    opex_labor = p.labor_count * p.avg_labor_cost
    opex_maintenance = total_capex * p.maintenance_rate / 100

    total_opex = opex_power + opex_reagents + opex_labor + opex_maintenance

    return {
        "annual_energy": annual_energy,
        "annual_acid": annual_acid,
        "annual_guar": annual_guar,
        "annual_solvent": annual_solvent,
        "annual_cobalt": annual_cobalt,
        "opex_power": opex_power,
        "opex_acid": opex_acid,
        "opex_guar": opex_guar,
        "opex_solvent": opex_solvent,
        "opex_cobalt": opex_cobalt,
        "opex_reagents": opex_reagents,
        "opex_labor": opex_labor,
        "opex_maintenance": opex_maintenance,
        "total_opex": total_opex,
        "production_cost_per_ton": total_opex / p.annual_production if p.annual_production > 0 else 0.0,
    }


def calculate_economics(p, r, reagent_bases=None) -> dict:
    capex = calculate_capex(p, r)
    opex = calculate_opex(p, r, capex["total_capex"], reagent_bases or DEFAULT_REAGENT_BASES)
    return {**capex, **opex}


def _format_number(n) -> str:
    return f"{n:,.0f}"


def build_capex_line_items(params, results: dict) -> list[dict]:
    items = [
        ("Pumps", "PLS and raffinate pumps",
         results["pls_pump_power"] + results["raffinate_pump_power"], "kW", params.pump_cost_per_kw,
         "capex_pumps"),
        ("Crushing", "Crushing circuit (Bond's law sizing)",
         results["crusher_power"], "kW", params.crusher_cost_per_kw, "capex_crusher"),
        ("Electrowinning", "Tankhouse rectifier",
         results["rectifier_power_ac"], "kW", params.rectifier_cost_per_kw, "capex_rectifier"),
        ("Heap Leach", "Lined leach pad",
         results["required_heap_area"], "m²", params.pad_cost_per_m2, "capex_pad"),
        ("Solution Handling", "PLS and raffinate ponds",
         results["pls_tank_volume"] + results["raffinate_tank_volume"], "m³", params.tank_cost_per_m3,
         "capex_tanks"),
    ]

    line_items = []
    for idx, (category, description, quantity, unit, unit_cost, key) in enumerate(items, start=1):
        line_items.append({
            "id": f"capex-{idx}",
            "category": category,
            "description": description,
            "quantity": quantity,
            "unit": unit,
            "unitCost": unit_cost,
            "totalCost": results[key],
            "costBasis": f"{_format_number(quantity)} {unit} × ${unit_cost:,.2f}/{unit}",
        })
    return line_items


def build_opex_line_items(params, results: dict, reagent_bases=None) -> list[dict]:
    bases = normalize_reagent_bases(reagent_bases)
    line_items: list[dict] = []
    id_counter = [0]

    def make_id() -> str:
        id_counter[0] += 1
        return f"opex-{id_counter[0]}"

    line_items.append({
        "id": make_id(),
        "category": "Energy",
        "description": "Electric power for pumps, crushing and rectifier",
        "annualCost": results["opex_power"],
        "costBasis": f"{_format_number(results['annual_energy'])} kWh/yr × ${params.electricity_price}/kWh",
    })
    line_items.append({
        "id": make_id(),
        "category": "Reagents",
        "description": "Sulphuric acid",
        "annualCost": results["opex_acid"],
        "costBasis": f"{_format_number(results['annual_acid'])} t/yr × ${params.acid_price}/t",
    })
    for reagent, label, annual_key, cost_key, price in (
        ("guar", "Guar / flocculant", "annual_guar", "opex_guar", params.guar_price),
        ("solvent", "Solvent make-up", "annual_solvent", "opex_solvent", params.solvent_price),
        ("cobalt", "Cobalt sulphate", "annual_cobalt", "opex_cobalt", params.cobalt_price),
    ):
        line_items.append({
            "id": make_id(),
            "category": "Reagents",
            "description": f"{label} (per {BASIS_LABELS[bases[reagent]]})",
            "annualCost": results[cost_key],
            "costBasis": f"{_format_number(results[annual_key])} kg/yr × ${price}/kg",
        })
    line_items.append({
        "id": make_id(),
        "category": "Labor",
        "description": "Site workforce",
        "annualCost": results["opex_labor"],
        "costBasis": f"{params.labor_count:g} persons × ${_format_number(params.avg_labor_cost)}/yr",
    })
    line_items.append({
        "id": make_id(),
        "category": "Maintenance",
        "description": f"Annual maintenance ({params.maintenance_rate:g}% of CAPEX)",
        "annualCost": results["opex_maintenance"],
        "costBasis": f"{params.maintenance_rate:g}% × ${_format_number(results['total_capex'])}",
    })
    return line_items
