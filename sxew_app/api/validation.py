import math
from typing import Any

from sxew_app.models.schemas import ParameterSet
from sxew_app.services.economics import DEFAULT_REAGENT_BASES, REAGENT_BASES
from sxew_app.services.parameter_library import (
    PARAMETER_DEFAULTS,
    PARAMETER_SPECS,
    resolve_parameter_name,
)


def coerce_number(raw: Any) -> float:
    """Form text to float. Empty, non-numeric and non-finite input becomes 0."""
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        num = float(raw)
    else:
        text = str(raw).strip().replace(",", "")
        if not text:
            return 0.0
        try:
            num = float(text)
        except (ValueError, TypeError):
            return 0.0
    if math.isnan(num) or math.isinf(num):
        return 0.0
    return num


def _is_numeric_text(raw: Any) -> bool:
    if isinstance(raw, bool):
        return False
    if isinstance(raw, (int, float)):
        return not (math.isnan(raw) or math.isinf(raw))
    try:
        num = float(str(raw).strip().replace(",", ""))
    except (ValueError, TypeError):
        return False
    return not (math.isnan(num) or math.isinf(num))


def check_domain(name: str, value: float) -> list[dict]:
    spec = PARAMETER_SPECS[name]
    warnings = []
    lower = spec.get("min")
    upper = spec.get("max")
    if lower is not None and value < lower:
        warnings.append({
            "field": name,
            "symbol": spec["symbol"],
            "message": f"{spec['label']} is below its allowed minimum of {lower} {spec['unit']}",
            "severity": "warning",
        })
    if upper is not None and value > upper:
        warnings.append({
            "field": name,
            "symbol": spec["symbol"],
            "message": f"{spec['label']} exceeds its allowed maximum of {upper} {spec['unit']}",
            "severity": "warning",
        })
    return warnings


def build_parameter_set(
    raw_inputs: dict[str, Any] | None,
    base: dict[str, float] | None = None,
) -> tuple[ParameterSet, list[dict]]:
    """
    Merge raw form values over `base` (defaults when omitted) and coerce them
    into a ParameterSet. Keys may be field names, camelCase field names or
    form symbols. Returns the parameter set and the boundary warnings.
    """
    values = dict(base or PARAMETER_DEFAULTS)
    warnings: list[dict] = []

    for key, raw in (raw_inputs or {}).items():
        name = resolve_parameter_name(key)
        if name is None:
            warnings.append({
                "field": key,
                "message": f'Unknown parameter "{key}" ignored',
                "severity": "info",
            })
            continue

        if raw is not None and str(raw).strip() != "" and not _is_numeric_text(raw):
            warnings.append({
                "field": name,
                "symbol": PARAMETER_SPECS[name]["symbol"],
                "message": f'Non-numeric value "{raw}" treated as 0',
                "severity": "warning",
                "originalValue": str(raw),
            })
        values[name] = coerce_number(raw)

    for name, value in values.items():
        warnings.extend(check_domain(name, value))

    return ParameterSet(**values), warnings


def sanitize_reagent_bases(reagent_bases: dict | None) -> tuple[dict, list[dict]]:
    bases = dict(DEFAULT_REAGENT_BASES)
    warnings: list[dict] = []
    for reagent, basis in (reagent_bases or {}).items():
        if reagent not in DEFAULT_REAGENT_BASES:
            warnings.append({
                "field": f"reagentBases.{reagent}",
                "message": f'Unknown reagent "{reagent}" ignored',
                "severity": "info",
            })
            continue
        if basis not in REAGENT_BASES:
            warnings.append({
                "field": f"reagentBases.{reagent}",
                "message": f'Unknown consumption basis "{basis}"; must be one of: {", ".join(REAGENT_BASES)}',
                "severity": "warning",
            })
            continue
        bases[reagent] = basis
    return bases, warnings
