"""Tests for the feed-forward process model (stages 1-5)."""

import math

import pytest
from pydantic import ValidationError

from sxew_app.models.schemas import ParameterSet, ResultSet
from sxew_app.services import process_model
from sxew_app.services.process_model import (
    STAGES,
    bond_specific_energy,
    check_stage_order,
    evaluate,
    faraday_current,
    pump_power,
    safe_div,
)


def _with(params: ParameterSet, **changes) -> ParameterSet:
    return params.model_copy(update=changes)


def _all_finite(results: dict) -> bool:
    return all(math.isfinite(v) for v in results.values())


class TestSafeDiv:
    """Zero-fallback division."""

    def test_positive_denominator(self):
        assert safe_div(10, 4) == 2.5

    def test_zero_denominator(self):
        assert safe_div(10, 0) == 0.0

    def test_negative_denominator(self):
        assert safe_div(10, -2) == 0.0

    def test_nan_denominator(self):
        assert safe_div(10, float("nan")) == 0.0


class TestProduction:
    """Production & feed-rate stage."""

    def test_worked_example(self, example_results):
        assert example_results["p_hr_ton"] == pytest.approx(1.1905, abs=1e-4)
        assert example_results["p_hr_kg"] == pytest.approx(1190.476, abs=1e-3)

    def test_hourly_rate_recovers_annual_target(self):
        for P, wd, wh in [(10000, 350, 24), (2500, 300, 20), (123456.7, 365, 23.5)]:
            r = evaluate(ParameterSet(annual_production=P, working_days=wd, working_hours=wh)).model_dump()
            assert r["p_hr_ton"] * wd * wh == pytest.approx(P, rel=1e-12)

    def test_hourly_ore_feed_rate(self, example_params):
        r = evaluate(example_params).model_dump()
        # (P / wd) / (grade * recovery) / wh with grade 0.6 %, recovery 80 %
        expected = (10000 / 350) / (0.006 * 0.8) / 24
        assert r["hourly_ore_feed_rate"] == pytest.approx(expected)
        assert r["q1"] == r["hourly_ore_feed_rate"]
        assert r["annual_ore"] == pytest.approx(expected * 24 * 350)

    def test_cathode_stream_matches_hourly_production(self, example_results):
        assert example_results["q16"] == example_results["p_hr_ton"]


class TestHeapSizing:
    """Heap / ore sizing stage."""

    def test_required_area(self, default_params):
        r = evaluate(default_params).model_dump()
        ore_on_heap = r["hourly_ore_feed_rate"] * default_params.working_hours * default_params.leach_cycle
        assert r["total_ore_on_heap"] == pytest.approx(ore_on_heap)
        assert r["required_heap_area"] == pytest.approx(
            ore_on_heap / (default_params.heap_height * default_params.ore_density)
        )
        assert r["heap_volume"] == pytest.approx(ore_on_heap / default_params.ore_density)

    def test_taller_heap_needs_less_area(self, default_params):
        low = evaluate(_with(default_params, heap_height=6)).required_heap_area
        high = evaluate(_with(default_params, heap_height=12)).required_heap_area
        assert high == pytest.approx(low / 2)

    def test_leach_cycle_is_reported(self, default_params):
        r = evaluate(_with(default_params, leach_cycle=120))
        assert r.leach_cycle_time == 120


class TestMassBalance:
    """Stream flows and concentrations."""

    def test_worked_example_streams(self, example_results):
        r = example_results
        assert r["q4"] == pytest.approx(10000 * 1000 / (350 * 24 * 3.5 * 0.85))
        assert r["q4"] == pytest.approx(400.16, abs=0.01)
        assert r["c11"] == pytest.approx(0.525)
        assert r["q5"] == pytest.approx(r["q4"] * 1.2)
        assert r["q8"] == pytest.approx(119.05, abs=0.01)

    def test_raffinate_flow_equals_pls_flow(self, example_results):
        assert example_results["q11"] == example_results["q4"]

    @pytest.mark.parametrize("recovery, expected_fraction", [(0, 1.0), (50, 0.5), (100, 0.0)])
    def test_raffinate_concentration(self, default_params, recovery, expected_fraction):
        r = evaluate(_with(default_params, sx_recovery=recovery))
        assert r.c11 == pytest.approx(expected_fraction * default_params.pls_concentration)

    def test_zero_recovery_leaves_pls_unchanged(self, default_params):
        r = evaluate(_with(default_params, sx_recovery=0))
        assert r.c11 == r.c4

    def test_evaporation_and_make_up(self, default_params):
        r = evaluate(_with(default_params, evaporation=12)).model_dump()
        assert r["e_heap"] == pytest.approx(0.12 * r["q11"])
        assert r["q2"] == r["e_heap"]
        assert r["q19"] == r["e_heap"]
        assert r["q12"] == pytest.approx(r["q11"] + r["q19"])

    @pytest.mark.parametrize("evaporation", [0, 5, 10, 35])
    def test_blend_to_heap_conserves_copper(self, default_params, evaporation):
        r = evaluate(_with(default_params, evaporation=evaporation))
        assert r.q12 > 0
        assert r.q12 * r.c12 == pytest.approx(r.q11 * r.c11, rel=1e-12)

    def test_loaded_organic_carries_extracted_copper(self, default_params):
        params = _with(default_params, lean_organic_concentration=2.0, organic_loss=1.5)
        r = evaluate(params)
        assert r.q6 == pytest.approx(r.q5 * 0.985)
        assert r.q15 == pytest.approx(r.q5 - r.q6)
        # copper transferred in stripping equals the cathode production rate
        assert r.q5 * r.c5 - r.q6 * r.c6 == pytest.approx(r.p_hr_kg, rel=1e-9)

    def test_loaded_organic_without_lean_copper(self, example_results):
        r = example_results
        assert r["c5"] == pytest.approx(0.85 * 3.5 / 1.2)

    def test_rich_electrolyte_balance(self, default_params):
        r = evaluate(_with(default_params, organic_loss=2)).model_dump()
        assert r["q7"] == pytest.approx(r["q8"] + r["q5"] - r["q6"])
        assert r["q7"] * r["c7"] == pytest.approx(r["q8"] * r["c8"] + r["p_hr_kg"], rel=1e-9)

    def test_rich_electrolyte_concentration_rises_by_delta_cu(self, default_params):
        r = evaluate(default_params)
        assert r.q7 == pytest.approx(r.q8)
        assert r.c7 == pytest.approx(r.c8 + default_params.delta_cu)

    def test_bleed_and_water_streams(self, default_params):
        r = evaluate(_with(default_params, bleed_flow=2.5)).model_dump()
        assert r["q9"] == 2.5
        assert r["q10"] == 2.5
        assert r["c9"] == r["c8"]
        assert r["q18"] == pytest.approx(2.5 * r["c8"])
        assert r["q17"] == pytest.approx(r["q19"] + r["q10"])


class TestAcidBalance:
    """Acid split between raffinate and agglomeration."""

    def test_split(self, default_params):
        r = evaluate(default_params).model_dump()
        acid_kg_h = default_params.acid_consumption * r["hourly_ore_feed_rate"]
        factor = default_params.acid_density * 1000
        assert r["q13"] == pytest.approx(acid_kg_h * 0.75 / factor)
        assert r["q20"] == pytest.approx(acid_kg_h * 0.25 / factor)

    def test_no_agglomeration_sends_all_acid_to_raffinate(self, default_params):
        r = evaluate(_with(default_params, agglo_acid_percent=0)).model_dump()
        acid_kg_h = default_params.acid_consumption * r["hourly_ore_feed_rate"]
        assert r["q13"] == pytest.approx(acid_kg_h / (default_params.acid_density * 1000))
        assert r["q20"] == 0

    def test_bleed_acid(self, default_params):
        r = evaluate(_with(default_params, bleed_flow=1, bleed_acid_concentration=150, acid_density=1.84))
        assert r.q14 == pytest.approx(150 / 1840)

    def test_irrigation_includes_acid(self, default_params):
        r = evaluate(default_params)
        assert r.q3 == pytest.approx(r.q12 + r.q13)
        assert r.q3 * r.c3 == pytest.approx(r.q12 * r.c12)


class TestEquipmentSizing:
    """Pumps, crusher, rectifier and tanks."""

    def test_pump_power(self):
        expected = (400 / 3600 * 30 * 9.81 * 1000) / (0.75 * 0.95 * 1000)
        assert pump_power(400, 30, 75, 95) == pytest.approx(expected)

    def test_pump_power_without_efficiency(self):
        assert pump_power(400, 30, 0, 95) == 0.0

    def test_bond_specific_energy(self):
        expected = 14 * 10 * (1 / math.sqrt(12500) - 1 / math.sqrt(150000))
        assert bond_specific_energy(14, 12500, 150000) == pytest.approx(expected)

    def test_faraday_current(self, example_results):
        assert faraday_current(example_results["p_hr_kg"], 90) == pytest.approx(1.1158e6, rel=1e-3)

    def test_rectifier_power(self, example_params, example_results):
        r = example_results
        assert r["rectifier_power_dc"] == pytest.approx(r["total_current"] * example_params.cell_voltage / 1000)
        assert r["rectifier_power_ac"] == pytest.approx(r["rectifier_power_dc"] / 0.95)

    def test_crusher_power(self, example_results):
        r = example_results
        assert r["crusher_power"] == pytest.approx(r["specific_energy"] * r["hourly_ore_feed_rate"])

    def test_tank_volumes(self, default_params):
        r = evaluate(_with(default_params, pls_tank_residence=6, raffinate_tank_residence=10))
        assert r.pls_tank_volume == pytest.approx(r.q4 * 6)
        assert r.raffinate_tank_volume == pytest.approx(r.q11 * 10)

    def test_total_power_consumption(self, example_results):
        r = example_results
        assert r["total_power_consumption"] == pytest.approx(
            r["pls_pump_power"] + r["raffinate_pump_power"] + r["crusher_power"] + r["rectifier_power_ac"]
        )


class TestZeroGuards:
    """Ill-posed ratios evaluate to exactly zero and never NaN or infinity."""

    @pytest.mark.parametrize("field, dependents", [
        ("acid_density", ["q13", "q14", "q20"]),
        ("delta_cu", ["q8"]),
        ("pls_concentration", ["q4", "q11", "q5", "c12"]),
        ("sx_recovery", ["q4", "q5", "q12"]),
        ("working_days", ["p_hr_ton", "hourly_ore_feed_rate", "q4", "q8"]),
        ("working_hours", ["p_hr_ton", "hourly_ore_feed_rate", "total_ore_on_heap"]),
        ("heap_height", ["required_heap_area"]),
        ("ore_density", ["required_heap_area", "heap_volume", "annual_heap_volume"]),
        ("product_size", ["specific_energy", "crusher_power"]),
        ("feed_size", ["specific_energy", "crusher_power"]),
        ("current_efficiency", ["total_current", "rectifier_power_dc"]),
        ("ore_grade", ["hourly_ore_feed_rate", "crusher_power"]),
    ])
    @pytest.mark.parametrize("value", [0, -1])
    def test_denominator_guard(self, default_params, field, dependents, value):
        r = evaluate(_with(default_params, **{field: value})).model_dump()
        for key in dependents:
            assert r[key] == 0, key
        assert _all_finite(r)

    @pytest.mark.parametrize("changes, dependents", [
        ({"working_days": 1e-200, "working_hours": 1e-200}, ["p_hr_ton", "hourly_ore_feed_rate", "q4"]),
        ({"pls_concentration": 1e-200, "sx_recovery": 1e-150}, ["q4", "q5", "q12"]),
        ({"heap_height": 1e-200, "ore_density": 1e-200}, ["required_heap_area", "capex_pad"]),
    ])
    def test_denominator_product_underflow(self, default_params, changes, dependents):
        r = evaluate(_with(default_params, **changes)).model_dump()
        for key in dependents:
            assert r[key] == 0, key
        assert _all_finite(r)

    def test_all_zero_inputs(self):
        zeros = {name: 0.0 for name in ParameterSet.model_fields}
        r = evaluate(ParameterSet(**zeros)).model_dump()
        assert _all_finite(r)
        assert all(v == 0 for v in r.values())

    def test_production_cost_without_production(self, default_params):
        r = evaluate(_with(default_params, annual_production=0))
        assert r.production_cost_per_ton == 0
        assert r.total_opex > 0


class TestDeterminism:
    """Same inputs always give the same outputs."""

    def test_bit_identical(self, default_params):
        first = evaluate(default_params).model_dump()
        second = evaluate(default_params).model_dump()
        assert {k: float(v).hex() for k, v in first.items()} == {k: float(v).hex() for k, v in second.items()}

    def test_returns_result_set(self, default_params):
        assert isinstance(evaluate(default_params), ResultSet)

    def test_result_set_is_immutable(self, default_params):
        r = evaluate(default_params)
        with pytest.raises(ValidationError):
            r.q4 = 0


class TestScaling:
    """Doubling the production target."""

    def test_linear_streams(self, default_params):
        base = evaluate(_with(default_params, annual_production=10000))
        double = evaluate(_with(default_params, annual_production=20000))
        for key in ("q4", "q8", "p_hr_ton", "hourly_ore_feed_rate", "required_heap_area", "rectifier_power_dc"):
            assert getattr(double, key) == pytest.approx(2 * getattr(base, key)), key

    def test_opex_increases(self, default_params):
        base = evaluate(_with(default_params, annual_production=10000))
        double = evaluate(_with(default_params, annual_production=20000))
        assert double.total_opex > base.total_opex
        variable_base = base.total_opex - base.opex_labor
        variable_double = double.total_opex - double.opex_labor
        assert variable_double == pytest.approx(2 * variable_base)


class TestStageOrder:
    """The stage pipeline is acyclic and complete."""

    def test_stages_cover_result_set(self):
        produced = [key for _name, _fn, _req, provides in STAGES for key in provides]
        assert len(produced) == len(set(produced))
        assert set(produced) == set(ResultSet.model_fields)

    def test_out_of_order_stage_rejected(self):
        reordered = [STAGES[1], STAGES[0]] + STAGES[2:]
        with pytest.raises(ValueError, match="depends on values not produced earlier"):
            check_stage_order(reordered)

    def test_redefinition_rejected(self):
        with pytest.raises(ValueError, match="redefines"):
            check_stage_order(STAGES + [STAGES[0]])

    def test_stage_sees_only_declared_values(self, monkeypatch):
        def reads_undeclared(p, r):
            return {"leach_cycle_time": r["p_hr_ton"]}

        stages = [
            STAGES[0],
            ("heap", reads_undeclared, ("hourly_ore_feed_rate",), ("leach_cycle_time",)),
        ]
        check_stage_order(stages)
        monkeypatch.setattr(process_model, "STAGES", stages)
        with pytest.raises(KeyError):
            evaluate(ParameterSet())
