"""Least-cost diet optimization with a two-phase simplex engine."""

from dietlp.optimizer import (
    FoodItem,
    NutrientRequirement,
    OptimizationResult,
    RequirementTable,
    build_model,
    solve_nutrition_optimization,
)

__version__ = "0.1.0"

__all__ = [
    "FoodItem",
    "NutrientRequirement",
    "RequirementTable",
    "OptimizationResult",
    "build_model",
    "solve_nutrition_optimization",
]
