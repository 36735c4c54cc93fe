"""Serialization utilities for requirement tables, catalogs and results.

The requirement format matches the YAML profile format read by
load_requirements_from_yaml(), and the catalog format matches
load_catalog_from_yaml(), so dicts produced here can be dumped to YAML or
JSON and read back.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from dietlp.optimizer.constraints import parse_food, parse_requirements
from dietlp.optimizer.models import FoodItem, OptimizationResult, RequirementTable


def serialize_requirements(requirements: Any) -> dict[str, Any]:
    """Convert a requirement table to the profile dict format.

    Args:
        requirements: RequirementTable or anything RequirementTable.coerce accepts

    Returns:
        ``{"nutrients": {name: {"min": x, "max": y}}}``; "max" is omitted for
        min-only requirements
    """
    table = RequirementTable.coerce(requirements)
    nutrients: dict[str, dict[str, float]] = {}
    for name, req in table.items():
        bounds: dict[str, float] = {"min": req.min_value}
        if req.max_value is not None:
            bounds["max"] = req.max_value
        nutrients[name] = bounds
    return {"nutrients": nutrients}


def deserialize_requirements(data: dict[str, Any]) -> RequirementTable:
    """Convert a profile dict back into a RequirementTable.

    Raises:
        KeyError: If a nutrient name is unknown
        InvalidRequirementError: If bounds are malformed
    """
    return parse_requirements(data)


def serialize_catalog(catalog: Sequence[FoodItem]) -> dict[str, Any]:
    """Convert a food catalog to the catalog dict format."""
    return {
        "foods": [
            {
                "id": food.id,
                "description": food.description,
                "cost": food.unit_cost,
                "serving_grams": food.serving_grams,
                "nutrients": dict(food.nutrients),
            }
            for food in catalog
        ]
    }


def deserialize_catalog(data: dict[str, Any]) -> list[FoodItem]:
    """Convert a catalog dict back into FoodItems."""
    return [parse_food(entry) for entry in data.get("foods", [])]


def result_to_dict(result: OptimizationResult) -> dict[str, Any]:
    """Convert an OptimizationResult into JSON-serializable primitives."""
    return {
        "feasible": result.feasible,
        "status": result.status,
        "message": result.message,
        "total_cost": result.total_cost,
        "selections": [
            {
                "id": sel.food.id,
                "description": sel.food.description,
                "quantity": sel.quantity,
                "grams": sel.grams,
                "cost": sel.cost,
            }
            for sel in result.selections
        ],
        "achieved_nutrients": dict(result.achieved_nutrients),
        "nutrients": [
            {
                "name": n.name,
                "unit": n.unit,
                "amount": n.amount,
                "min": n.min_value,
                "max": n.max_value,
                "satisfied": n.satisfied,
            }
            for n in result.nutrients
        ],
        "solver_info": dict(result.solver_info),
    }
