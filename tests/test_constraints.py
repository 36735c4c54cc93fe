"""Tests for model building and YAML loading."""

from __future__ import annotations

import math
import tempfile
from pathlib import Path

import numpy as np
import pytest

from dietlp.optimizer.constraints import (
    ModelBuilder,
    build_model,
    load_catalog_from_yaml,
    load_requirements_from_yaml,
    parse_food,
    prefilter_catalog,
)
from dietlp.optimizer.models import (
    EmptyCatalogError,
    FoodItem,
    InvalidFoodError,
    InvalidRequirementError,
    NutrientRequirement,
    Relation,
    RequirementTable,
)


class TestModelBuilder:
    """Tests for the ModelBuilder class."""

    def test_build_with_sample_foods(self, sample_foods, daily_requirements):
        """Row and column layout for a realistic catalog."""
        lp = build_model(sample_foods, daily_requirements)

        assert lp.n_variables == 7
        # energy is ranged (2 rows), the other seven are min-only
        assert lp.n_rows == 9
        assert lp.variable_ids == (1, 2, 3, 4, 5, 6, 7)
        np.testing.assert_allclose(lp.objective, [0.15, 0.30, 0.10, 0.40, 0.25, 0.80, 0.20])
        assert lp.nutrient_matrix.shape == (7, 8)

    def test_ranged_requirement_emits_two_rows(self, two_food_catalog):
        """A min/max pair becomes a >= row followed by a <= row."""
        lp = build_model(two_food_catalog, {"x": {"min": 10, "max": 40}})

        assert lp.relations == (Relation.GE, Relation.LE)
        np.testing.assert_array_equal(lp.rhs, [10, 40])
        np.testing.assert_array_equal(lp.constraint_matrix[0], lp.constraint_matrix[1])
        assert lp.row_nutrients == ("x", "x")

    def test_min_only_requirement_emits_one_row(self, two_food_catalog):
        """A plain minimum is a single >= row."""
        lp = build_model(two_food_catalog, {"x": 10})

        assert lp.relations == (Relation.GE,)
        np.testing.assert_array_equal(lp.constraint_matrix, [[10, 5]])

    def test_missing_contribution_is_zero(self):
        """Foods that don't list a nutrient contribute nothing to it."""
        catalog = [
            FoodItem(id="a", unit_cost=1, nutrients={"x": 3}),
            FoodItem(id="b", unit_cost=1, nutrients={"y": 4}),
        ]

        lp = build_model(catalog, {"x": 1, "y": 1})

        np.testing.assert_array_equal(lp.constraint_matrix, [[3, 0], [0, 4]])

    def test_variable_order_follows_catalog(self, two_food_catalog):
        """Reversing the catalog reverses the columns."""
        lp = build_model(list(reversed(two_food_catalog)), {"x": 10})

        assert lp.variable_ids == ("B", "A")
        np.testing.assert_array_equal(lp.objective, [2.0, 1.0])

    def test_no_requirements_gives_no_rows(self, two_food_catalog):
        """An empty table still yields a well-shaped program."""
        lp = build_model(two_food_catalog, {})

        assert lp.n_rows == 0
        assert lp.constraint_matrix.shape == (0, 2)

    def test_empty_catalog_raises(self):
        """No foods means nothing to optimize."""
        with pytest.raises(EmptyCatalogError):
            build_model([], {"x": 10})

    def test_max_below_min_raises(self, two_food_catalog):
        """Malformed ranges are rejected before any rows are built."""
        with pytest.raises(InvalidRequirementError):
            build_model(two_food_catalog, {"x": {"min": 10, "max": 5}})

    def test_negative_min_raises(self, two_food_catalog):
        """Minimums must be non-negative."""
        with pytest.raises(InvalidRequirementError):
            build_model(two_food_catalog, {"x": -1})

    def test_duplicate_food_ids_raise(self):
        """Food ids must be unique."""
        catalog = [
            FoodItem(id=1, unit_cost=1, nutrients={"x": 1}),
            FoodItem(id=1, unit_cost=2, nutrients={"x": 2}),
        ]

        with pytest.raises(InvalidFoodError):
            ModelBuilder(catalog, {"x": 1})

    def test_requirement_sequence_accepted(self, two_food_catalog):
        """A list of NutrientRequirement works like a table."""
        lp = build_model(two_food_catalog, [NutrientRequirement("x", 10, 20)])

        assert lp.n_rows == 2


class TestRequirementTable:
    """Tests for requirement validation and coercion."""

    def test_from_mapping_forms(self):
        """Dicts, tuples and bare numbers all describe requirements."""
        table = RequirementTable.from_mapping(
            {"a": {"min": 1, "max": 2}, "b": (3, None), "c": 4}
        )

        assert table["a"].max_value == 2
        assert table["b"].min_value == 3
        assert not table["b"].is_ranged
        assert table["c"].min_value == 4
        assert list(table) == ["a", "b", "c"]

    def test_infinite_max_means_no_max(self):
        """An unbounded maximum collapses to a plain minimum."""
        req = NutrientRequirement("x", 10, math.inf)

        assert req.max_value is None
        assert not req.is_ranged

    def test_infinite_max_emits_single_row(self, two_food_catalog):
        lp = build_model(two_food_catalog, {"x": {"min": 10, "max": math.inf}})

        assert lp.relations == (Relation.GE,)
        assert np.all(np.isfinite(lp.rhs))

    def test_negative_infinite_max_raises(self):
        with pytest.raises(InvalidRequirementError):
            NutrientRequirement("x", 0, -math.inf)

    def test_zero_range_is_valid(self):
        """min == max == 0 pins a nutrient to zero."""
        req = NutrientRequirement("x", 0, 0)

        assert req.is_ranged

    def test_duplicate_names_raise(self):
        with pytest.raises(InvalidRequirementError):
            RequirementTable([NutrientRequirement("x", 1), NutrientRequirement("x", 2)])

    def test_non_numeric_bounds_raise(self):
        with pytest.raises(InvalidRequirementError):
            RequirementTable.from_mapping({"x": {"min": "lots"}})


class TestFoodItem:
    """Tests for catalog entry validation."""

    def test_negative_cost_raises(self):
        with pytest.raises(InvalidFoodError):
            FoodItem(id=1, unit_cost=-0.5)

    def test_negative_contribution_raises(self):
        with pytest.raises(InvalidFoodError):
            FoodItem(id=1, unit_cost=1, nutrients={"x": -2})

    def test_nutrients_are_read_only(self):
        food = FoodItem(id=1, unit_cost=1, nutrients={"x": 2})

        with pytest.raises(TypeError):
            food.nutrients["x"] = 5

    def test_default_description(self):
        assert FoodItem(id=42, unit_cost=1).description == "Food 42"


class TestPrefilter:
    """Tests for dropping useless foods."""

    def test_drops_costly_foods_without_contributions(self):
        catalog = [
            FoodItem(id="useful", unit_cost=1, nutrients={"x": 1}),
            FoodItem(id="useless", unit_cost=1, nutrients={"y": 1}),
            FoodItem(id="free", unit_cost=0, nutrients={}),
        ]

        kept = prefilter_catalog(catalog, {"x": 1})

        assert [f.id for f in kept] == ["useful", "free"]


class TestLoadFromYAML:
    """Tests for YAML catalog and profile loading."""

    def test_load_catalog(self, catalog_yaml):
        """Catalog entries become FoodItems in file order."""
        catalog = load_catalog_from_yaml(catalog_yaml)

        assert len(catalog) == 7
        assert catalog[0].description == "Rice, white, cooked"
        assert catalog[0].unit_cost == 0.15
        assert catalog[5].contribution("total_fat") == 100
        assert catalog[5].contribution("protein") == 0.0

    def test_load_profile_with_aliases(self, profile_yaml):
        """Shorthand and camelCase names resolve to registry keys."""
        table = load_requirements_from_yaml(profile_yaml)

        assert list(table) == ["energy", "protein", "fiber", "vitamin_c"]
        assert table["energy"].min_value == 2000
        assert table["energy"].max_value == 2500
        assert table["vitamin_c"].max_value is None

    def test_load_profile_with_unknown_nutrient(self):
        """Unknown nutrient names raise an error."""
        yaml_content = """
nutrients:
  unknown_nutrient:
    min: 100
"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write(yaml_content)
            yaml_path = Path(f.name)

        try:
            with pytest.raises(KeyError):
                load_requirements_from_yaml(yaml_path)
        finally:
            yaml_path.unlink()

    def test_load_profile_with_inverted_range(self):
        """A max below the min is rejected while loading."""
        yaml_content = """
nutrients:
  protein:
    min: 100
    max: 50
"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write(yaml_content)
            yaml_path = Path(f.name)

        try:
            with pytest.raises(InvalidRequirementError):
                load_requirements_from_yaml(yaml_path)
        finally:
            yaml_path.unlink()

    def test_load_profile_with_infinite_max(self):
        """YAML .inf is read as "no maximum"."""
        yaml_content = """
nutrients:
  sodium:
    min: 500
    max: .inf
"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write(yaml_content)
            yaml_path = Path(f.name)

        try:
            table = load_requirements_from_yaml(yaml_path)
        finally:
            yaml_path.unlink()

        assert table["sodium"].min_value == 500
        assert table["sodium"].max_value is None

    def test_load_profile_with_non_numeric_bound(self):
        yaml_content = """
nutrients:
  protein:
    min: lots
"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write(yaml_content)
            yaml_path = Path(f.name)

        try:
            with pytest.raises(InvalidRequirementError):
                load_requirements_from_yaml(yaml_path)
        finally:
            yaml_path.unlink()

    def test_load_catalog_with_non_numeric_cost(self):
        yaml_content = """
foods:
  - id: 1
    cost: cheap
    nutrients:
      protein: 10
"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write(yaml_content)
            yaml_path = Path(f.name)

        try:
            with pytest.raises(InvalidFoodError):
                load_catalog_from_yaml(yaml_path)
        finally:
            yaml_path.unlink()

    def test_load_catalog_with_broken_yaml(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write("foods: [unclosed\n")
            yaml_path = Path(f.name)

        try:
            with pytest.raises(InvalidFoodError):
                load_catalog_from_yaml(yaml_path)
        finally:
            yaml_path.unlink()

    def test_load_profile_that_is_not_a_mapping(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write("- protein\n- iron\n")
            yaml_path = Path(f.name)

        try:
            with pytest.raises(InvalidRequirementError):
                load_requirements_from_yaml(yaml_path)
        finally:
            yaml_path.unlink()


class TestParseFood:
    """Tests for single catalog entries."""

    def test_parse_food(self):
        food = parse_food(
            {"id": "oats", "cost": "0.2", "serving_grams": 40, "nutrients": {"kcal": 389}}
        )

        assert food.unit_cost == 0.2
        assert food.serving_grams == 40.0
        assert food.contribution("energy") == 389.0

    @pytest.mark.parametrize(
        "entry",
        [
            {"id": 1, "cost": "cheap"},
            {"id": 1, "cost": 1.0, "nutrients": {"protein": "some"}},
            {"id": 1, "cost": 1.0, "serving_grams": None},
        ],
    )
    def test_non_numeric_values_raise(self, entry):
        with pytest.raises(InvalidFoodError):
            parse_food(entry)

    def test_missing_cost_raises(self):
        with pytest.raises(KeyError):
            parse_food({"id": 1})
