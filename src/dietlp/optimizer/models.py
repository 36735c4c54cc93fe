"""Data models for nutrition optimization requests and results."""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional, Union

import numpy as np


# Custom exceptions


class DietLPError(Exception):
    """Base exception for dietlp errors."""

    pass


class EmptyCatalogError(DietLPError, ValueError):
    """Raised when no foods are supplied to the model builder."""

    pass


class InvalidRequirementError(DietLPError, ValueError):
    """Raised when a nutrient requirement is malformed."""

    pass


class InvalidFoodError(DietLPError, ValueError):
    """Raised when a catalog entry is malformed."""

    pass


class SolverError(DietLPError):
    """Base class for computation failures inside a solver."""

    def __init__(self, message: str, phase: Optional[int] = None, pivots: int = 0):
        super().__init__(message)
        self.phase = phase
        self.pivots = pivots


class UnboundedProblemError(SolverError):
    """Raised when the objective can decrease without limit."""

    pass


class PivotLimitExceededError(SolverError):
    """Raised when a simplex phase exceeds its pivot budget."""

    pass


class Relation(Enum):
    """Relation between a constraint row and its right-hand side."""

    GE = ">="
    LE = "<="
    EQ = "="


class SimplexStatus(Enum):
    """Outcomes the simplex engine returns; failures are raised instead."""

    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"


@dataclass(frozen=True)
class NutrientRequirement:
    """A required range for a single nutrient.

    The maximum is optional; a requirement without one is a plain minimum.
    An infinite maximum is the same as no maximum.
    """

    name: str
    min_value: float = 0.0
    max_value: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidRequirementError("Requirement needs a nutrient name")
        if not math.isfinite(self.min_value) or self.min_value < 0:
            raise InvalidRequirementError(
                f"{self.name}: minimum must be a finite number >= 0, got {self.min_value}"
            )
        if self.max_value == math.inf:
            object.__setattr__(self, "max_value", None)
        if self.max_value is not None:
            if math.isnan(self.max_value):
                raise InvalidRequirementError(f"{self.name}: maximum is NaN")
            if self.max_value < self.min_value:
                raise InvalidRequirementError(
                    f"{self.name}: maximum {self.max_value} is below minimum {self.min_value}"
                )

    @property
    def is_ranged(self) -> bool:
        return self.max_value is not None


RequirementSpec = Union[NutrientRequirement, Mapping[str, Any], tuple, float, int]


class RequirementTable(Mapping):
    """Immutable, ordered mapping of nutrient name to requirement."""

    def __init__(self, requirements: Iterable[NutrientRequirement] = ()):
        entries: dict[str, NutrientRequirement] = {}
        for req in requirements:
            if req.name in entries:
                raise InvalidRequirementError(f"Duplicate requirement for {req.name}")
            entries[req.name] = req
        self._entries = MappingProxyType(entries)

    @classmethod
    def from_mapping(cls, data: Mapping[str, RequirementSpec]) -> "RequirementTable":
        """Build a table from plain data.

        Each value may be a NutrientRequirement, a dict with "min"/"max" keys,
        a (min, max) tuple, or a bare number meaning a minimum.
        """
        requirements = []
        for name, spec in data.items():
            requirements.append(_coerce_requirement(name, spec))
        return cls(requirements)

    @classmethod
    def coerce(cls, requirements: Any) -> "RequirementTable":
        """Accept a table, a mapping or a sequence of requirements."""
        if isinstance(requirements, RequirementTable):
            return requirements
        if isinstance(requirements, Mapping):
            return cls.from_mapping(requirements)
        return cls(list(requirements))

    def __getitem__(self, name: str) -> NutrientRequirement:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"RequirementTable({list(self._entries.values())!r})"


def _coerce_requirement(name: str, spec: RequirementSpec) -> NutrientRequirement:
    if isinstance(spec, NutrientRequirement):
        if spec.name != name:
            raise InvalidRequirementError(
                f"Requirement keyed as {name} is named {spec.name}"
            )
        return spec
    if isinstance(spec, Mapping):
        min_val = spec.get("min", 0.0)
        max_val = spec.get("max")
    elif isinstance(spec, tuple):
        if len(spec) != 2:
            raise InvalidRequirementError(f"{name}: expected (min, max), got {spec!r}")
        min_val, max_val = spec
    else:
        min_val, max_val = spec, None

    try:
        min_val = float(min_val) if min_val is not None else 0.0
        max_val = float(max_val) if max_val is not None else None
    except (TypeError, ValueError) as e:
        raise InvalidRequirementError(f"{name}: bounds must be numeric ({e})") from e

    return NutrientRequirement(name=name, min_value=min_val, max_value=max_val)


@dataclass(frozen=True)
class FoodItem:
    """A catalog entry: cost and nutrient contributions per consumption unit.

    One unit corresponds to ``serving_grams`` grams of the food (100 g by
    default, matching per-100g nutrient tables). Nutrients missing from
    ``nutrients`` contribute zero.
    """

    id: Union[str, int]
    unit_cost: float
    nutrients: Mapping[str, float] = field(default_factory=dict)
    description: str = ""
    serving_grams: float = 100.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.unit_cost) or self.unit_cost < 0:
            raise InvalidFoodError(
                f"Food {self.id}: unit cost must be a finite number >= 0, got {self.unit_cost}"
            )
        if self.serving_grams <= 0:
            raise InvalidFoodError(f"Food {self.id}: serving_grams must be positive")
        contributions = {}
        for name, amount in self.nutrients.items():
            amount = float(amount)
            if not math.isfinite(amount) or amount < 0:
                raise InvalidFoodError(
                    f"Food {self.id}: contribution to {name} must be >= 0, got {amount}"
                )
            contributions[name] = amount
        object.__setattr__(self, "nutrients", MappingProxyType(contributions))
        if not self.description:
            object.__setattr__(self, "description", f"Food {self.id}")

    def contribution(self, nutrient: str) -> float:
        """Per-unit contribution to a nutrient (zero when absent)."""
        return self.nutrients.get(nutrient, 0.0)


@dataclass(frozen=True, eq=False)
class LinearProgram:
    """Standard-form LP: minimize objective @ x subject to rows, x >= 0."""

    variable_ids: tuple
    objective: np.ndarray  # shape (n_variables,)
    constraint_matrix: np.ndarray  # shape (n_rows, n_variables)
    relations: tuple[Relation, ...]
    rhs: np.ndarray  # shape (n_rows,)
    row_nutrients: tuple[str, ...] = ()
    nutrient_names: tuple[str, ...] = ()
    nutrient_matrix: Optional[np.ndarray] = None  # shape (n_variables, n_nutrients)

    def __post_init__(self) -> None:
        n_rows = len(self.relations)
        if self.constraint_matrix.shape != (n_rows, len(self.variable_ids)):
            raise ValueError(
                f"constraint_matrix shape {self.constraint_matrix.shape} does not match "
                f"{n_rows} rows x {len(self.variable_ids)} variables"
            )
        if self.rhs.shape != (n_rows,):
            raise ValueError(f"rhs must have {n_rows} entries")
        if self.objective.shape != (len(self.variable_ids),):
            raise ValueError("objective must have one coefficient per variable")
        for name, values in (
            ("constraint_matrix", self.constraint_matrix),
            ("rhs", self.rhs),
            ("objective", self.objective),
        ):
            if not np.all(np.isfinite(values)):
                raise ValueError(f"{name} must be finite")

    @property
    def n_variables(self) -> int:
        return len(self.variable_ids)

    @property
    def n_rows(self) -> int:
        return len(self.relations)


@dataclass(frozen=True, eq=False)
class SimplexSolution:
    """Raw output of an LP backend."""

    x: np.ndarray
    feasible: bool
    objective_value: Optional[float]
    status: SimplexStatus
    phase1_pivots: int = 0
    phase2_pivots: int = 0


@dataclass(frozen=True)
class FoodSelection:
    """A food chosen by the optimizer and its quantity in consumption units."""

    food: FoodItem
    quantity: float

    @property
    def grams(self) -> float:
        return self.quantity * self.food.serving_grams

    @property
    def cost(self) -> float:
        return self.quantity * self.food.unit_cost


@dataclass(frozen=True)
class NutrientResult:
    """Summary of a required nutrient in the result."""

    name: str
    unit: str
    amount: float
    min_value: Optional[float]
    max_value: Optional[float]
    satisfied: bool


@dataclass(frozen=True)
class OptimizationResult:
    """Complete output from the optimizer."""

    feasible: bool
    selections: tuple[FoodSelection, ...] = ()
    total_cost: float = 0.0
    achieved_nutrients: Mapping[str, float] = field(default_factory=dict)
    status: str = "optimal"  # 'optimal' | 'infeasible'
    message: str = ""
    nutrients: tuple[NutrientResult, ...] = ()
    solver_info: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "selections", tuple(self.selections))
        object.__setattr__(self, "nutrients", tuple(self.nutrients))
        object.__setattr__(
            self, "achieved_nutrients", MappingProxyType(dict(self.achieved_nutrients))
        )
        object.__setattr__(self, "solver_info", MappingProxyType(dict(self.solver_info)))

    def with_solver_info(self, **info: Any) -> "OptimizationResult":
        """Return a copy with extra solver metadata merged in."""
        merged = dict(self.solver_info)
        merged.update(info)
        return replace(self, solver_info=merged)
