"""Optimization engine for least-cost diet planning."""

from dietlp.optimizer.constraints import ModelBuilder, build_model
from dietlp.optimizer.interpreter import interpret
from dietlp.optimizer.models import (
    DietLPError,
    EmptyCatalogError,
    FoodItem,
    FoodSelection,
    InvalidFoodError,
    InvalidRequirementError,
    LinearProgram,
    NutrientRequirement,
    NutrientResult,
    OptimizationResult,
    PivotLimitExceededError,
    Relation,
    RequirementTable,
    SimplexSolution,
    SimplexStatus,
    SolverError,
    UnboundedProblemError,
)
from dietlp.optimizer.simplex import solve
from dietlp.optimizer.solver import solve_lp, solve_nutrition_optimization

__all__ = [
    "NutrientRequirement",
    "RequirementTable",
    "FoodItem",
    "Relation",
    "LinearProgram",
    "SimplexStatus",
    "SimplexSolution",
    "FoodSelection",
    "NutrientResult",
    "OptimizationResult",
    "DietLPError",
    "EmptyCatalogError",
    "InvalidRequirementError",
    "InvalidFoodError",
    "SolverError",
    "UnboundedProblemError",
    "PivotLimitExceededError",
    "ModelBuilder",
    "build_model",
    "solve",
    "interpret",
    "solve_lp",
    "solve_nutrition_optimization",
]
