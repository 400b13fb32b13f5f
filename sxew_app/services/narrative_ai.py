"""
Narrative analysis of a finished calculation.

Builds a plain-language prompt from the headline results (CAPEX, OPEX, unit
cost, power, pad area, ore feed rate) and asks an LLM for a short
engineering commentary. The process model never depends on the answer.
"""
import logging
from typing import Optional

from .llm import llm_complete, get_default_model
from .result_library import NARRATIVE_KEYS, RESULT_SPECS, format_result

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a senior hydrometallurgist reviewing a conceptual design for a copper heap leach, solvent extraction and electrowinning (SX-EW) plant. You comment on capital and operating cost, energy demand, pad footprint and ore throughput. Be concrete, point out figures that look high or low for a plant of this size, and keep to what the numbers support."""

ANALYSIS_TEMPLATE = """Review the following key results of an SX-EW plant calculation.

PLANT BASIS:
{{PLANT_BASIS}}

KEY RESULTS:
{{KEY_RESULTS}}

Write a short analysis (at most {{MAX_PARAGRAPHS}} paragraphs) in {{LANGUAGE}} covering:
1. Whether capital and operating costs are reasonable for this production rate
2. The main cost drivers and where savings could come from
3. Any design figure that deserves a second look"""


def narrative_fields(results: dict) -> dict:
    return {key: results[key] for key in NARRATIVE_KEYS}


def build_key_results_string(results: dict) -> str:
    lines = []
    for key, value in narrative_fields(results).items():
        spec = RESULT_SPECS[key]
        lines.append(f"  {spec['label']}: {format_result(key, value)} {spec['unit']}")
    return "\n".join(lines)


def build_plant_basis_string(inputs: dict) -> str:
    return "\n".join([
        f"  Annual cathode production: {inputs['annual_production']:,.0f} t/yr",
        f"  Operating schedule: {inputs['working_days']:g} d/yr x {inputs['working_hours']:g} h/d",
        f"  Ore grade: {inputs['ore_grade']:g} % Cu, overall recovery {inputs['total_recovery']:g} %",
        f"  PLS copper: {inputs['pls_concentration']:g} g/L, SX extraction {inputs['sx_recovery']:g} %",
    ])


def build_analysis_prompt(inputs: dict, results: dict, language: str = "English", max_paragraphs: int = 4) -> str:
    return (
        ANALYSIS_TEMPLATE
        .replace("{{PLANT_BASIS}}", build_plant_basis_string(inputs))
        .replace("{{KEY_RESULTS}}", build_key_results_string(results))
        .replace("{{LANGUAGE}}", language)
        .replace("{{MAX_PARAGRAPHS}}", str(max_paragraphs))
    )


def generate_narrative_analysis(
    inputs: dict,
    results: dict,
    model: Optional[str] = None,
    language: str = "English",
) -> dict:
    prompt = build_analysis_prompt(inputs, results, language)
    model = model or get_default_model()

    logger.info("Narrative analysis: requesting commentary from %s", model)
    completion = llm_complete(
        model=model,
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        max_tokens=1200,
    )

    return {
        "text": (completion.get("content") or "").strip(),
        "provider": completion.get("provider"),
        "fields": narrative_fields(results),
        "promptTokens": completion.get("prompt_tokens"),
        "completionTokens": completion.get("completion_tokens"),
    }
