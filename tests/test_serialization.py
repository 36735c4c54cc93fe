"""Tests for serialization of requirements, catalogs and results."""

from __future__ import annotations

import json

import pytest

from dietlp.optimizer.models import InvalidRequirementError, NutrientRequirement, RequirementTable
from dietlp.optimizer.serialization import (
    deserialize_catalog,
    deserialize_requirements,
    result_to_dict,
    serialize_catalog,
    serialize_requirements,
)
from dietlp.optimizer.solver import solve_nutrition_optimization


class TestRequirementSerialization:
    """Tests for the profile dict format."""

    def test_serialize_min_only_omits_max(self):
        table = RequirementTable([NutrientRequirement("protein", 50)])

        data = serialize_requirements(table)

        assert data == {"nutrients": {"protein": {"min": 50}}}

    def test_serialize_ranged(self):
        data = serialize_requirements({"energy": {"min": 2000, "max": 2500}})

        assert data["nutrients"]["energy"] == {"min": 2000, "max": 2500}

    def test_round_trip(self, daily_requirements):
        """Serialized tables read back to the same requirements."""
        restored = deserialize_requirements(serialize_requirements(daily_requirements))

        assert list(restored) == list(daily_requirements)
        for name in daily_requirements:
            assert restored[name] == daily_requirements[name]

    def test_deserialize_resolves_aliases(self):
        restored = deserialize_requirements({"nutrients": {"kcal": {"min": 1800}}})

        assert list(restored) == ["energy"]

    def test_deserialize_bare_number(self):
        restored = deserialize_requirements({"nutrients": {"iron": 18}})

        assert restored["iron"].min_value == 18.0
        assert restored["iron"].max_value is None

    def test_deserialize_rejects_bad_range(self):
        with pytest.raises(InvalidRequirementError):
            deserialize_requirements({"nutrients": {"iron": {"min": 20, "max": 10}}})


class TestCatalogSerialization:
    """Tests for the catalog dict format."""

    def test_round_trip(self, sample_foods):
        restored = deserialize_catalog(serialize_catalog(sample_foods))

        assert restored == sample_foods

    def test_empty_catalog(self):
        assert deserialize_catalog({}) == []


class TestResultToDict:
    """Tests for JSON-ready result dicts."""

    def test_feasible_result_is_json_serializable(self, two_food_catalog):
        result = solve_nutrition_optimization(two_food_catalog, {"x": 10})

        data = result_to_dict(result)
        parsed = json.loads(json.dumps(data))

        assert parsed["feasible"] is True
        assert parsed["total_cost"] == 1.0
        assert parsed["selections"][0]["id"] == "A"
        assert parsed["selections"][0]["grams"] == pytest.approx(100.0)
        assert parsed["achieved_nutrients"] == {"x": 10.0}
        assert parsed["nutrients"][0]["min"] == 10.0
        assert parsed["solver_info"]["solver"] == "simplex"

    def test_infeasible_result(self, two_food_catalog):
        result = solve_nutrition_optimization(two_food_catalog, {"y": 1})

        data = result_to_dict(result)

        assert data["feasible"] is False
        assert data["status"] == "infeasible"
        assert data["selections"] == []
        assert data["achieved_nutrients"] == {}
        assert data["solver_info"]["objective_value"] is None
