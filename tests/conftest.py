"""Pytest fixtures for dietlp tests."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
import yaml

from dietlp.optimizer.models import (
    FoodItem,
    NutrientRequirement,
    RequirementTable,
)


@pytest.fixture
def two_food_catalog():
    """Food A costs 1 for 10 units of X, food B costs 2 for 5 units of X."""
    return [
        FoodItem(id="A", unit_cost=1.0, nutrients={"x": 10.0}),
        FoodItem(id="B", unit_cost=2.0, nutrients={"x": 5.0}),
    ]


@pytest.fixture
def sample_foods():
    """Staple foods with per-100g nutrients and prices."""
    return [
        # Rice, cooked: 130 kcal, 2.7g protein, 28g carbs, 0.3g fat, 0.4g fiber
        FoodItem(
            id=1,
            description="Rice, white, cooked",
            unit_cost=0.15,
            nutrients={
                "energy": 130, "protein": 2.7, "carbohydrate": 28, "total_fat": 0.3,
                "fiber": 0.4, "calcium": 10, "iron": 0.2, "vitamin_c": 0,
            },
        ),
        FoodItem(
            id=2,
            description="Lentils, cooked",
            unit_cost=0.30,
            nutrients={
                "energy": 116, "protein": 9, "carbohydrate": 20, "total_fat": 0.4,
                "fiber": 8, "calcium": 19, "iron": 3.3, "vitamin_c": 1.5,
            },
        ),
        FoodItem(
            id=3,
            description="Milk, whole",
            unit_cost=0.10,
            nutrients={
                "energy": 61, "protein": 3.2, "carbohydrate": 4.8, "total_fat": 3.3,
                "calcium": 113,
            },
        ),
        FoodItem(
            id=4,
            description="Spinach, raw",
            unit_cost=0.40,
            nutrients={
                "energy": 23, "protein": 2.9, "carbohydrate": 3.6, "total_fat": 0.4,
                "fiber": 2.2, "calcium": 99, "iron": 2.7, "vitamin_c": 28,
            },
        ),
        FoodItem(
            id=5,
            description="Oranges, raw",
            unit_cost=0.25,
            nutrients={
                "energy": 47, "protein": 0.9, "carbohydrate": 12, "total_fat": 0.1,
                "fiber": 2.4, "calcium": 40, "iron": 0.1, "vitamin_c": 53,
            },
        ),
        FoodItem(
            id=6,
            description="Olive oil",
            unit_cost=0.80,
            nutrients={"energy": 884, "total_fat": 100},
        ),
        FoodItem(
            id=7,
            description="Oats, rolled",
            unit_cost=0.20,
            nutrients={
                "energy": 389, "protein": 17, "carbohydrate": 66, "total_fat": 7,
                "fiber": 10.6, "calcium": 54, "iron": 4.7,
            },
        ),
    ]


@pytest.fixture
def daily_requirements():
    """Adult daily requirements with a ranged energy target."""
    return RequirementTable(
        [
            NutrientRequirement("energy", min_value=2000, max_value=2500),
            NutrientRequirement("protein", min_value=50),
            NutrientRequirement("carbohydrate", min_value=130),
            NutrientRequirement("total_fat", min_value=44),
            NutrientRequirement("fiber", min_value=25),
            NutrientRequirement("calcium", min_value=1000),
            NutrientRequirement("iron", min_value=18),
            NutrientRequirement("vitamin_c", min_value=90),
        ]
    )


@pytest.fixture
def catalog_yaml(sample_foods):
    """Write the sample foods to a temporary YAML catalog."""
    data = {
        "foods": [
            {
                "id": food.id,
                "description": food.description,
                "cost": food.unit_cost,
                "nutrients": dict(food.nutrients),
            }
            for food in sample_foods
        ]
    }
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.safe_dump(data, f)
        yaml_path = Path(f.name)

    yield yaml_path

    yaml_path.unlink(missing_ok=True)


@pytest.fixture
def profile_yaml():
    """Write a small requirement profile to a temporary YAML file."""
    yaml_content = """
nutrients:
  calories:
    min: 2000
    max: 2500
  protein:
    min: 60
  fiber:
    min: 25
  vitaminC:
    min: 90
"""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write(yaml_content)
        yaml_path = Path(f.name)

    yield yaml_path

    yaml_path.unlink(missing_ok=True)
