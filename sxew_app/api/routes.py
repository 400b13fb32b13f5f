import logging

from fastapi import APIRouter, HTTPException, Response

from sxew_app.api.validation import build_parameter_set, sanitize_reagent_bases
from sxew_app.models.schemas import AnalysisRequest, CalculateRequest
from sxew_app.services.economics import build_capex_line_items, build_opex_line_items
from sxew_app.services.export_service import (
    EXPORT_FILENAME,
    export_calculation_excel,
    export_calculation_pdf,
)
from sxew_app.services.llm import PROVIDER_LABELS, get_available_providers, get_default_model
from sxew_app.services.narrative_ai import generate_narrative_analysis
from sxew_app.services.parameter_library import (
    get_help_rows,
    get_parameters_by_section,
)
from sxew_app.services.process_model import evaluate
from sxew_app.services.result_library import (
    RESULT_SECTION_LABELS,
    RESULT_SPECS,
    build_sections,
    build_summary,
)
from sxew_app.services.storage import storage

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _calculation_payload(inputs, results, reagent_bases: dict, warnings: list) -> dict:
    inputs_dict = inputs.model_dump()
    results_dict = results.model_dump()
    return {
        "inputs": inputs_dict,
        "results": results_dict,
        "summary": build_summary(results_dict),
        "sections": build_sections(results_dict),
        "capex_line_items": build_capex_line_items(inputs, results_dict),
        "opex_line_items": build_opex_line_items(inputs, results_dict, reagent_bases),
        "reagent_bases": reagent_bases,
        "warnings": warnings,
    }


def _session_payload(session: dict) -> dict:
    return {
        "session_id": session["id"],
        "revision": session["revision"],
        **_calculation_payload(
            session["inputs"], session["results"], session["reagent_bases"], session["warnings"],
        ),
        "analysis": session.get("analysis"),
        "updated_at": session["updated_at"],
    }


def _require_session(session_id: str) -> dict:
    session = storage.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


# ---------------------------------------------------------------------------
# Schema routes
# ---------------------------------------------------------------------------


@api_router.get("/parameters")
async def get_parameter_schema():
    return {
        "sections": get_parameters_by_section(),
        "help": get_help_rows(),
    }


@api_router.get("/results/schema")
async def get_result_schema():
    return {
        "sections": RESULT_SECTION_LABELS,
        "results": [{"name": key, **spec} for key, spec in RESULT_SPECS.items()],
    }


@api_router.get("/llm-providers")
async def get_llm_providers():
    available = get_available_providers()
    return {
        "providers": [{"id": p, "label": PROVIDER_LABELS.get(p, p)} for p in available],
        "default": get_default_model(),
    }


# ---------------------------------------------------------------------------
# Calculation routes
# ---------------------------------------------------------------------------


@api_router.post("/evaluate")
async def evaluate_stateless(body: CalculateRequest):
    params, warnings = build_parameter_set(body.inputs)
    bases, basis_warnings = sanitize_reagent_bases(body.reagent_bases)
    results = evaluate(params, bases)
    return _calculation_payload(params, results, bases, warnings + basis_warnings)


@api_router.post("/calculate")
async def calculate(body: CalculateRequest):
    session = storage.get_or_create_session(body.session_id)
    revision = storage.next_revision()

    params, warnings = build_parameter_set(body.inputs, base=session["inputs"].model_dump())
    bases, basis_warnings = sanitize_reagent_bases(body.reagent_bases or session["reagent_bases"])
    warnings = warnings + basis_warnings
    results = evaluate(params, bases)

    kept = storage.store_result(session["id"], revision, params, results, bases, warnings)
    logger.info(
        "Calculated session %s revision %d (%d warnings, kept=%s)",
        session["id"], revision, len(warnings), kept,
    )
    return {
        "session_id": session["id"],
        "revision": revision,
        "is_latest": kept,
        **_calculation_payload(params, results, bases, warnings),
    }


@api_router.post("/sessions", status_code=201)
async def create_session():
    return _session_payload(storage.create_session())


@api_router.get("/sessions/{session_id}")
async def get_session(session_id: str):
    return _session_payload(_require_session(session_id))


@api_router.post("/sessions/{session_id}/reset")
async def reset_session(session_id: str):
    _require_session(session_id)
    return _session_payload(storage.reset_session(session_id))


@api_router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str):
    if not storage.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Export routes
# ---------------------------------------------------------------------------


@api_router.get("/sessions/{session_id}/export-excel")
async def export_excel(session_id: str):
    session = _require_session(session_id)
    try:
        content = export_calculation_excel(session["inputs"].model_dump(), session["results"].model_dump())
    except Exception as e:
        logger.error("Excel export failed for session %s: %s", session_id, str(e))
        raise HTTPException(status_code=500, detail="Failed to export Excel report")
    return Response(
        content=content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}.xlsx"'},
    )


@api_router.get("/sessions/{session_id}/export-pdf")
async def export_pdf(session_id: str):
    session = _require_session(session_id)
    analysis = session.get("analysis") or {}
    try:
        content = export_calculation_pdf(
            session["inputs"].model_dump(),
            session["results"].model_dump(),
            analysis.get("text", ""),
        )
    except Exception as e:
        logger.error("PDF export failed for session %s: %s", session_id, str(e))
        raise HTTPException(status_code=500, detail="Failed to export PDF report")
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}.pdf"'},
    )


# ---------------------------------------------------------------------------
# Narrative analysis
# ---------------------------------------------------------------------------


@api_router.post("/sessions/{session_id}/analysis")
async def analyze_session(session_id: str, body: AnalysisRequest):
    session = _require_session(session_id)
    try:
        analysis = generate_narrative_analysis(
            session["inputs"].model_dump(),
            session["results"].model_dump(),
            model=body.model,
            language=body.language,
        )
    except Exception as e:
        logger.error("Narrative analysis failed for session %s: %s", session_id, str(e))
        raise HTTPException(status_code=502, detail="Narrative analysis service unavailable")

    storage.store_analysis(session_id, session["revision"], analysis)
    return {"session_id": session_id, "revision": session["revision"], **analysis}
