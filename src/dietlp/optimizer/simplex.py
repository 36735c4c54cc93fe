"""Two-phase primal simplex solver over a dense numpy tableau.

Minimizes c'x subject to rows of the form a'x (>=, <=, =) b and x >= 0.

Phase 1 minimizes the sum of artificial variables to find a basic feasible
solution; an artificial left above tolerance means the LP is infeasible.
Phase 2 drops the artificial columns, installs the real costs and pivots to
optimality.

Rows and columns are equilibrated to unit peak magnitude before the tableau
is built, so the zero tolerance means the same thing for a calorie row in the
thousands and a mineral row near one. The constraint rows are periodically
recomputed from the original matrix and the current basis with an LU solve,
and every optimal or unbounded verdict is confirmed on a freshly recomputed
tableau.

Pivoting uses Dantzig's rule (most negative reduced cost) with lowest-index
tie-breaks. After a run of degenerate pivots the engine switches to Bland's
rule for the rest of the phase, which rules out cycling. Each phase also has
a pivot budget so numerical trouble surfaces as an error instead of a hang.
"""

from __future__ import annotations

import logging
import warnings
from typing import Optional

import numpy as np
from scipy.linalg import LinAlgWarning, lu_factor, lu_solve

from dietlp.optimizer.models import (
    LinearProgram,
    PivotLimitExceededError,
    Relation,
    SimplexSolution,
    SimplexStatus,
    UnboundedProblemError,
)

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 1e-7
DEFAULT_PIVOT_LIMIT_FACTOR = 10

# Consecutive degenerate pivots before falling back to Bland's rule
DEGENERATE_STREAK_LIMIT = 20

# Pivots between recomputations of the constraint rows
REFACTOR_INTERVAL = 25

_FLIPPED = {Relation.GE: Relation.LE, Relation.LE: Relation.GE, Relation.EQ: Relation.EQ}


def _equilibrate(A: np.ndarray, b: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Scale rows, then columns, to a peak magnitude of one.

    Returns the scaled matrix, the scaled right-hand side and the column
    factors; a solution y of the scaled system maps back as x = y * factors.
    """
    m, n = A.shape
    if m == 0:
        return A, b, np.ones(n)

    row_peak = np.max(np.abs(A), axis=1) if n else np.zeros(m)
    row_peak[row_peak == 0] = 1.0
    A = A / row_peak[:, None]
    b = b / row_peak

    col_peak = np.max(np.abs(A), axis=0)
    col_peak[col_peak == 0] = 1.0
    return A / col_peak, b, 1.0 / col_peak


class _Tableau:
    """Augmented matrix owned by a single solve call.

    Layout: rows 0..m-1 are constraints, the last row holds reduced costs.
    Columns are decision variables, then slack/surplus variables, then
    artificial variables, then the right-hand side. The objective row's
    right-hand side holds minus the current objective value.
    """

    def __init__(self, lp: LinearProgram, epsilon: float):
        self.eps = epsilon
        self.n_decision = lp.n_variables

        A = np.array(lp.constraint_matrix, dtype=float)
        b = np.array(lp.rhs, dtype=float)
        relations = list(lp.relations)
        m = len(relations)

        # Non-negative right-hand sides so slack bases start feasible
        for i in range(m):
            if b[i] < 0:
                A[i] = -A[i]
                b[i] = -b[i]
                relations[i] = _FLIPPED[relations[i]]

        A, b, self.col_factor = _equilibrate(A, b)
        b[b < epsilon] = 0.0

        n_slack = sum(1 for rel in relations if rel is not Relation.EQ)
        needs_artificial = [
            rel is Relation.EQ or (rel is Relation.GE and b[i] > 0)
            for i, rel in enumerate(relations)
        ]

        self.artificial_start = self.n_decision + n_slack
        # Original row of each artificial column, in column order
        self.artificial_rows = np.flatnonzero(needs_artificial)
        self.scaled_rhs = b
        n_columns = self.artificial_start + len(self.artificial_rows)

        T = np.zeros((m + 1, n_columns + 1))
        basis = np.zeros(m, dtype=int)
        slack_col = self.n_decision
        art_col = self.artificial_start

        for i, rel in enumerate(relations):
            row = A[i]
            if rel is Relation.GE and not needs_artificial[i]:
                # a'x >= 0 becomes -a'x + s = 0 with s basic at zero
                row = -row
                T[i, slack_col] = 1.0
                basis[i] = slack_col
                slack_col += 1
            elif rel is Relation.GE:
                T[i, slack_col] = -1.0
                slack_col += 1
                T[i, art_col] = 1.0
                basis[i] = art_col
                art_col += 1
            elif rel is Relation.LE:
                T[i, slack_col] = 1.0
                basis[i] = slack_col
                slack_col += 1
            else:
                T[i, art_col] = 1.0
                basis[i] = art_col
                art_col += 1

            T[i, : self.n_decision] = row
            T[i, -1] = b[i]

        T[np.abs(T) < epsilon] = 0.0
        self.T = T
        self.basis = basis
        # Untouched constraint rows, used to recompute T from the basis
        self.original = T[:-1].copy()
        self.costs = np.zeros(n_columns)

    @property
    def n_rows(self) -> int:
        return self.T.shape[0] - 1

    @property
    def n_columns(self) -> int:
        return self.T.shape[1] - 1

    @property
    def has_artificials(self) -> bool:
        return self.n_columns > self.artificial_start

    @property
    def objective_value(self) -> float:
        return -float(self.T[-1, -1])

    def install_objective(self, costs: np.ndarray) -> None:
        """Price a cost vector over all columns out against the basis."""
        self.costs = costs
        obj = np.zeros(self.n_columns + 1)
        obj[:-1] = costs
        for r, var in enumerate(self.basis):
            cb = costs[var]
            if cb != 0.0:
                obj -= cb * self.T[r]
        obj[np.abs(obj) < self.eps] = 0.0
        self.T[-1] = obj

    def install_phase1_objective(self) -> None:
        """Minimize the sum of artificial variables."""
        costs = np.zeros(self.n_columns)
        costs[self.artificial_start :] = 1.0
        self.install_objective(costs)

    def install_phase2_objective(self, costs: np.ndarray) -> None:
        """Minimize the scaled true costs."""
        full = np.zeros(self.n_columns)
        full[: self.n_decision] = costs * self.col_factor
        self.install_objective(full)

    def refactor(self) -> None:
        """Recompute the constraint rows from the original matrix and the basis.

        Rounding error from repeated pivots is discarded. A numerically
        singular basis leaves the tableau as it is.
        """
        m = self.n_rows
        if m == 0:
            return
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", LinAlgWarning)
            lu_and_piv = lu_factor(self.original[:, self.basis], check_finite=False)
            rows = lu_solve(lu_and_piv, self.original, check_finite=False)
        if not np.all(np.isfinite(rows)):
            logger.debug("Basis is numerically singular; keeping the pivoted tableau")
            return

        rows[np.abs(rows) < self.eps] = 0.0
        rows[:, self.basis] = np.eye(m)
        self.T[:-1] = rows
        self.install_objective(self.costs)

    def artificials_feasible(self) -> bool:
        """True when every artificial sits at zero within its row's tolerance."""
        values = self.column_values()[self.artificial_start :]
        tolerance = self.eps * np.maximum(1.0, self.scaled_rhs[self.artificial_rows])
        return bool(np.all(values <= tolerance))

    def choose_entering(self, bland: bool) -> Optional[int]:
        """Pick the entering column, or None when the basis is optimal."""
        reduced = self.T[-1, :-1]
        candidates = np.flatnonzero(reduced < -self.eps)
        if candidates.size == 0:
            return None
        if bland:
            return int(candidates[0])
        most_negative = reduced[candidates].min()
        ties = candidates[reduced[candidates] <= most_negative + self.eps]
        return int(ties[0])

    def choose_leaving(self, col: int) -> Optional[int]:
        """Minimum-ratio test; None when the column is unbounded."""
        column = self.T[:-1, col]
        rows = np.flatnonzero(column > self.eps)
        if rows.size == 0:
            return None
        ratios = self.T[rows, -1] / column[rows]
        best = ratios.min()
        ties = rows[ratios <= best + self.eps]
        return int(ties[np.argmin(self.basis[ties])])

    def pivot(self, row: int, col: int) -> None:
        T = self.T
        T[row] /= T[row, col]
        factors = T[:, col].copy()
        factors[row] = 0.0
        T -= np.outer(factors, T[row])
        T[np.abs(T) < self.eps] = 0.0
        T[row, col] = 1.0
        self.basis[row] = col

    def drive_out_artificials(self) -> None:
        """Remove artificial variables from the basis and drop their columns.

        A basic artificial at zero level is swapped for any non-artificial
        column with a nonzero entry in its row. When the row has none, the
        constraint is redundant and the row is dropped.
        """
        redundant = []
        for r in range(self.n_rows):
            if self.basis[r] < self.artificial_start:
                continue
            self.T[r, -1] = 0.0
            candidates = np.flatnonzero(
                np.abs(self.T[r, : self.artificial_start]) > self.eps
            )
            if candidates.size:
                self.pivot(r, int(candidates[0]))
            else:
                redundant.append(r)

        if redundant:
            logger.debug("Dropping %d redundant constraint rows", len(redundant))
            self.T = np.delete(self.T, redundant, axis=0)
            self.original = np.delete(self.original, redundant, axis=0)
            self.basis = np.delete(self.basis, redundant)

        artificial_cols = np.arange(self.artificial_start, self.n_columns)
        self.T = np.delete(self.T, artificial_cols, axis=1)
        self.original = np.delete(self.original, artificial_cols, axis=1)

    def column_values(self) -> np.ndarray:
        values = np.zeros(self.n_columns)
        values[self.basis] = self.T[:-1, -1]
        return values

    def decision_values(self) -> np.ndarray:
        scaled = self.column_values()[: self.n_decision]
        return np.maximum(scaled * self.col_factor, 0.0)


def _run_phase(tableau: _Tableau, phase: int, max_pivots: int) -> int:
    """Pivot until optimal. Returns the number of pivots performed.

    Raises:
        UnboundedProblemError: If an entering column has no limiting row
        PivotLimitExceededError: If the phase needs more than max_pivots pivots
    """
    pivots = 0
    since_refactor = 0
    degenerate_streak = 0
    bland = False

    while True:
        col = tableau.choose_entering(bland)
        if col is None:
            if since_refactor:
                tableau.refactor()
                since_refactor = 0
                continue
            return pivots

        if pivots >= max_pivots:
            raise PivotLimitExceededError(
                f"Phase {phase} exceeded the pivot limit of {max_pivots}",
                phase=phase,
                pivots=pivots,
            )

        row = tableau.choose_leaving(col)
        if row is None:
            if since_refactor:
                tableau.refactor()
                since_refactor = 0
                continue
            raise UnboundedProblemError(
                f"Phase {phase}: objective is unbounded along column {col}",
                phase=phase,
                pivots=pivots,
            )

        degenerate = tableau.T[row, -1] <= tableau.eps
        tableau.pivot(row, col)
        pivots += 1
        since_refactor += 1
        if since_refactor >= REFACTOR_INTERVAL:
            tableau.refactor()
            since_refactor = 0

        if degenerate:
            degenerate_streak += 1
            if not bland and degenerate_streak >= DEGENERATE_STREAK_LIMIT:
                logger.debug(
                    "Phase %d: %d degenerate pivots in a row, switching to Bland's rule",
                    phase,
                    degenerate_streak,
                )
                bland = True
        else:
            degenerate_streak = 0


def solve(
    lp: LinearProgram,
    epsilon: float = DEFAULT_EPSILON,
    max_pivots: Optional[int] = None,
    pivot_limit_factor: int = DEFAULT_PIVOT_LIMIT_FACTOR,
) -> SimplexSolution:
    """Solve a linear program with the two-phase simplex method.

    Args:
        lp: Standard-form linear program (minimization, x >= 0)
        epsilon: Zero tolerance for entries of the equilibrated tableau,
            reduced costs, ratios and the per-row phase-1 feasibility check
        max_pivots: Pivot budget per phase. Defaults to pivot_limit_factor
            times the number of tableau columns.
        pivot_limit_factor: Multiplier used when max_pivots is not given

    Returns:
        SimplexSolution. Infeasible programs return feasible=False.

    Raises:
        UnboundedProblemError: If phase 2 finds an improving ray
        PivotLimitExceededError: If a phase runs out of pivots
    """
    tableau = _Tableau(lp, epsilon)
    if max_pivots is None:
        max_pivots = pivot_limit_factor * max(tableau.n_columns, 1)

    logger.debug(
        "Simplex start: %d rows, %d variables, %d tableau columns, pivot limit %d",
        tableau.n_rows,
        lp.n_variables,
        tableau.n_columns,
        max_pivots,
    )

    phase1_pivots = 0
    if tableau.has_artificials:
        tableau.install_phase1_objective()
        phase1_pivots = _run_phase(tableau, phase=1, max_pivots=max_pivots)
        if not tableau.artificials_feasible():
            logger.debug(
                "Phase 1 optimum %.3g after %d pivots: infeasible",
                tableau.objective_value,
                phase1_pivots,
            )
            return SimplexSolution(
                x=np.zeros(lp.n_variables),
                feasible=False,
                objective_value=None,
                status=SimplexStatus.INFEASIBLE,
                phase1_pivots=phase1_pivots,
            )
        logger.debug("Phase 1 optimal after %d pivots", phase1_pivots)
        tableau.drive_out_artificials()

    tableau.install_phase2_objective(np.asarray(lp.objective, dtype=float))
    phase2_pivots = _run_phase(tableau, phase=2, max_pivots=max_pivots)

    x = tableau.decision_values()
    objective_value = float(np.dot(lp.objective, x))
    logger.debug(
        "Phase 2 optimal after %d pivots, objective %.6g", phase2_pivots, objective_value
    )

    return SimplexSolution(
        x=x,
        feasible=True,
        objective_value=objective_value,
        status=SimplexStatus.OPTIMAL,
        phase1_pivots=phase1_pivots,
        phase2_pivots=phase2_pivots,
    )
