"""Entry point composing model building, LP solving and interpretation."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Any, Optional

import numpy as np
from scipy.optimize import linprog

from dietlp.config.settings import OptimizationConfig
from dietlp.optimizer import simplex
from dietlp.optimizer.constraints import build_model, prefilter_catalog
from dietlp.optimizer.interpreter import interpret
from dietlp.optimizer.models import (
    FoodItem,
    LinearProgram,
    OptimizationResult,
    PivotLimitExceededError,
    Relation,
    RequirementTable,
    SimplexSolution,
    SimplexStatus,
    SolverError,
    UnboundedProblemError,
)

logger = logging.getLogger(__name__)


def solve_lp_highs(lp: LinearProgram, max_pivots: Optional[int] = None) -> SimplexSolution:
    """Solve the program with scipy.optimize.linprog using HiGHS.

    Used as an independent cross-check of the in-house simplex engine.
    Outcomes are mapped onto the same contract: infeasible programs return
    feasible=False, unbounded and iteration-limit outcomes raise.

    Args:
        lp: Standard-form linear program
        max_pivots: Optional iteration cap passed to HiGHS

    Returns:
        SimplexSolution (pivot counts are the HiGHS iteration count)
    """
    A_ub_rows = []
    b_ub_rows = []
    A_eq_rows = []
    b_eq_rows = []

    for row, relation, rhs in zip(lp.constraint_matrix, lp.relations, lp.rhs):
        if relation is Relation.GE:
            # -Ax <= -b  (i.e., Ax >= b)
            A_ub_rows.append(-row)
            b_ub_rows.append(-rhs)
        elif relation is Relation.LE:
            A_ub_rows.append(row)
            b_ub_rows.append(rhs)
        else:
            A_eq_rows.append(row)
            b_eq_rows.append(rhs)

    options: dict[str, Any] = {"presolve": True}
    if max_pivots is not None:
        options["maxiter"] = max_pivots

    result = linprog(
        c=lp.objective,
        A_ub=np.array(A_ub_rows) if A_ub_rows else None,
        b_ub=np.array(b_ub_rows) if b_ub_rows else None,
        A_eq=np.array(A_eq_rows) if A_eq_rows else None,
        b_eq=np.array(b_eq_rows) if b_eq_rows else None,
        bounds=(0, None),
        method="highs",
        options=options,
    )
    iterations = int(getattr(result, "nit", 0) or 0)

    if result.status == 2:
        return SimplexSolution(
            x=np.zeros(lp.n_variables),
            feasible=False,
            objective_value=None,
            status=SimplexStatus.INFEASIBLE,
            phase2_pivots=iterations,
        )
    if result.status == 3:
        raise UnboundedProblemError(f"HiGHS: {result.message}", pivots=iterations)
    if result.status == 1:
        raise PivotLimitExceededError(f"HiGHS: {result.message}", pivots=iterations)
    if not result.success:
        raise SolverError(f"HiGHS: {result.message}", pivots=iterations)

    x = np.maximum(result.x, 0.0)
    return SimplexSolution(
        x=x,
        feasible=True,
        objective_value=float(result.fun),
        status=SimplexStatus.OPTIMAL,
        phase2_pivots=iterations,
    )


def solve_lp(lp: LinearProgram, config: Optional[OptimizationConfig] = None) -> SimplexSolution:
    """Solve a LinearProgram with the configured backend."""
    config = config or OptimizationConfig()
    if config.backend == "highs":
        return solve_lp_highs(lp, max_pivots=config.max_pivots)
    return simplex.solve(
        lp,
        epsilon=config.epsilon,
        max_pivots=config.max_pivots,
        pivot_limit_factor=config.pivot_limit_factor,
    )


def solve_nutrition_optimization(
    catalog: Sequence[FoodItem],
    requirements: Any,
    config: Optional[OptimizationConfig] = None,
) -> OptimizationResult:
    """Find the least-cost food quantities meeting every nutrient range.

    Args:
        catalog: Foods to choose from
        requirements: RequirementTable, mapping of nutrient -> {min, max},
            or a sequence of NutrientRequirement
        config: Solver options; defaults to OptimizationConfig()

    Returns:
        OptimizationResult. An infeasible diet is reported through
        ``feasible=False``, not raised.

    Raises:
        EmptyCatalogError: If the catalog is empty
        InvalidRequirementError: If a requirement is malformed
        UnboundedProblemError: If the solver finds an unbounded direction
        PivotLimitExceededError: If the solver runs out of pivots
    """
    config = config or OptimizationConfig()
    start_time = time.time()

    catalog = list(catalog)
    table = RequirementTable.coerce(requirements)

    if catalog and config.prefilter_zero_contribution:
        filtered = prefilter_catalog(catalog, table)
        if filtered:
            logger.debug("Prefilter dropped %d foods", len(catalog) - len(filtered))
            catalog = filtered

    lp = build_model(catalog, table)
    solution = solve_lp(lp, config)

    result = interpret(
        lp,
        solution.x,
        solution.feasible,
        catalog,
        display_threshold=config.display_threshold,
        cost_decimals=config.cost_decimals,
        nutrient_decimals=config.nutrient_decimals,
    )

    elapsed = time.time() - start_time
    logger.info(
        "Diet optimization %s: %d foods selected, cost %.2f (%s, %.3fs)",
        result.status,
        len(result.selections),
        result.total_cost,
        config.backend,
        elapsed,
    )

    return result.with_solver_info(
        solver=config.backend,
        n_variables=lp.n_variables,
        n_constraints=lp.n_rows,
        phase1_pivots=solution.phase1_pivots,
        phase2_pivots=solution.phase2_pivots,
        iterations=solution.phase1_pivots + solution.phase2_pivots,
        objective_value=solution.objective_value,
        elapsed_seconds=elapsed,
    )
