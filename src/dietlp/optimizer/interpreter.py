"""Map a raw solver assignment back onto foods and nutrient totals."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

import numpy as np

from dietlp.data.nutrient_ids import get_nutrient_unit
from dietlp.optimizer.models import (
    FoodItem,
    FoodSelection,
    LinearProgram,
    NutrientResult,
    OptimizationResult,
    Relation,
)

DEFAULT_DISPLAY_THRESHOLD = 0.01
DEFAULT_COST_DECIMALS = 2
DEFAULT_NUTRIENT_DECIMALS = 1

# Slack allowed when flagging a nutrient as satisfied
SATISFACTION_TOLERANCE = 0.01

INFEASIBLE_MESSAGE = (
    "No feasible solution found. The constraints may be too strict "
    "or the food catalog too limited."
)


def interpret(
    lp: LinearProgram,
    assignment: Sequence[float],
    feasible: bool,
    catalog: Sequence[FoodItem],
    display_threshold: float = DEFAULT_DISPLAY_THRESHOLD,
    cost_decimals: int = DEFAULT_COST_DECIMALS,
    nutrient_decimals: int = DEFAULT_NUTRIENT_DECIMALS,
) -> OptimizationResult:
    """Build an OptimizationResult from a solver assignment.

    Only foods above ``display_threshold`` units are selected. Cost and
    nutrient totals are accumulated from unrounded quantities over the
    selected foods and rounded once at the end.

    Args:
        lp: The program that was solved
        assignment: Value per decision variable, aligned with lp.variable_ids
        feasible: Whether the solver found a feasible point
        catalog: Foods in the same order as the program's variables
        display_threshold: Smallest quantity reported as a selection
        cost_decimals: Rounding precision of total_cost
        nutrient_decimals: Rounding precision of achieved nutrient totals

    Returns:
        OptimizationResult

    Raises:
        ValueError: If catalog or assignment do not line up with lp
    """
    if not feasible:
        return OptimizationResult(
            feasible=False,
            selections=(),
            total_cost=0.0,
            achieved_nutrients={},
            status="infeasible",
            message=INFEASIBLE_MESSAGE,
        )

    catalog = list(catalog)
    x = np.asarray(assignment, dtype=float)
    if len(catalog) != lp.n_variables or x.shape != (lp.n_variables,):
        raise ValueError(
            f"Expected {lp.n_variables} foods and values, got "
            f"{len(catalog)} foods and {x.shape[0] if x.ndim else 0} values"
        )
    if tuple(food.id for food in catalog) != lp.variable_ids:
        raise ValueError("Catalog order does not match the program's variables")

    chosen = [i for i in range(len(catalog)) if x[i] > display_threshold]
    chosen.sort(key=lambda i: (-x[i], i))
    selections = [FoodSelection(food=catalog[i], quantity=float(x[i])) for i in chosen]

    total_cost = float(sum(sel.quantity * sel.food.unit_cost for sel in selections))

    totals = {
        name: float(sum(sel.quantity * sel.food.contribution(name) for sel in selections))
        for name in lp.nutrient_names
    }

    return OptimizationResult(
        feasible=True,
        selections=selections,
        total_cost=round(total_cost, cost_decimals),
        achieved_nutrients={
            name: round(amount, nutrient_decimals) for name, amount in totals.items()
        },
        status="optimal",
        message="Optimization successful",
        nutrients=_summarize_nutrients(lp, totals, nutrient_decimals),
    )


def _summarize_nutrients(
    lp: LinearProgram, totals: dict[str, float], nutrient_decimals: int
) -> list[NutrientResult]:
    """Pair each nutrient total with the bounds its rows impose."""
    mins: dict[str, Optional[float]] = {name: None for name in lp.nutrient_names}
    maxs: dict[str, Optional[float]] = {name: None for name in lp.nutrient_names}
    for name, relation, rhs in zip(lp.row_nutrients, lp.relations, lp.rhs):
        if relation in (Relation.GE, Relation.EQ):
            mins[name] = float(rhs)
        if relation in (Relation.LE, Relation.EQ):
            maxs[name] = float(rhs)

    results = []
    for name in lp.nutrient_names:
        amount = totals[name]
        satisfied = True
        if mins[name] is not None and amount < mins[name] - SATISFACTION_TOLERANCE:
            satisfied = False
        if maxs[name] is not None and amount > maxs[name] + SATISFACTION_TOLERANCE:
            satisfied = False
        results.append(
            NutrientResult(
                name=name,
                unit=get_nutrient_unit(name),
                amount=round(amount, nutrient_decimals),
                min_value=mins[name],
                max_value=maxs[name],
                satisfied=satisfied,
            )
        )
    return results
