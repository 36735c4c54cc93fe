"""Build the standard-form linear program for the optimizer."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import numpy as np
import yaml

from dietlp.data.nutrient_ids import get_nutrient_key
from dietlp.optimizer.models import (
    EmptyCatalogError,
    FoodItem,
    InvalidFoodError,
    InvalidRequirementError,
    LinearProgram,
    NutrientRequirement,
    Relation,
    RequirementTable,
)


class ModelBuilder:
    """Builds the LP matrices from a food catalog and a requirement table."""

    def __init__(self, catalog: Sequence[FoodItem], requirements: Any):
        """Initialize the model builder.

        Args:
            catalog: Foods in the order their decision variables should take
            requirements: RequirementTable, mapping of nutrient -> {min, max},
                or a sequence of NutrientRequirement

        Raises:
            EmptyCatalogError: If the catalog has no foods
            InvalidRequirementError: If a requirement is malformed
            InvalidFoodError: If two foods share an id
        """
        self.catalog = list(catalog)
        if not self.catalog:
            raise EmptyCatalogError("Food catalog is empty; nothing to optimize")
        self.requirements = RequirementTable.coerce(requirements)
        self._check_unique_ids()

    def build(self) -> LinearProgram:
        """Build the standard-form linear program.

        Returns:
            LinearProgram with one variable per food (catalog order), one >= row
            per requirement minimum and one <= row per requirement maximum
        """
        nutrient_names = tuple(self.requirements)
        nutrient_matrix = self._build_nutrient_matrix(nutrient_names)

        rows: list[np.ndarray] = []
        relations: list[Relation] = []
        rhs: list[float] = []
        row_nutrients: list[str] = []

        for j, name in enumerate(nutrient_names):
            req = self.requirements[name]
            col = nutrient_matrix[:, j]

            rows.append(col)
            relations.append(Relation.GE)
            rhs.append(req.min_value)
            row_nutrients.append(name)

            if req.is_ranged:
                rows.append(col)
                relations.append(Relation.LE)
                rhs.append(req.max_value)
                row_nutrients.append(name)

        n_foods = len(self.catalog)
        constraint_matrix = np.array(rows) if rows else np.zeros((0, n_foods))

        return LinearProgram(
            variable_ids=tuple(food.id for food in self.catalog),
            objective=self._build_cost_vector(),
            constraint_matrix=constraint_matrix,
            relations=tuple(relations),
            rhs=np.array(rhs, dtype=float),
            row_nutrients=tuple(row_nutrients),
            nutrient_names=nutrient_names,
            nutrient_matrix=nutrient_matrix,
        )

    def _check_unique_ids(self) -> None:
        seen = set()
        for food in self.catalog:
            if food.id in seen:
                raise InvalidFoodError(f"Duplicate food id in catalog: {food.id}")
            seen.add(food.id)

    def _build_cost_vector(self) -> np.ndarray:
        """Build the cost per consumption unit vector, shape (n_foods,)."""
        return np.array([food.unit_cost for food in self.catalog], dtype=float)

    def _build_nutrient_matrix(self, nutrient_names: tuple[str, ...]) -> np.ndarray:
        """Build nutrient matrix A where A[i,j] = nutrient j per unit of food i.

        Absent contributions are zero.
        """
        matrix = np.zeros((len(self.catalog), len(nutrient_names)))
        for i, food in enumerate(self.catalog):
            for j, name in enumerate(nutrient_names):
                matrix[i, j] = food.contribution(name)
        return matrix


def build_model(catalog: Sequence[FoodItem], requirements: Any) -> LinearProgram:
    """Translate a food catalog and requirement table into a LinearProgram."""
    return ModelBuilder(catalog, requirements).build()


def prefilter_catalog(
    catalog: Sequence[FoodItem], requirements: Any
) -> list[FoodItem]:
    """Drop foods that cost money but contribute nothing to any requirement.

    Such foods can never appear in a least-cost solution, so removing them
    shrinks the tableau without changing the optimum.
    """
    table = RequirementTable.coerce(requirements)
    kept = []
    for food in catalog:
        if food.unit_cost > 0 and not any(food.contribution(n) > 0 for n in table):
            continue
        kept.append(food)
    return kept


def parse_food(data: dict[str, Any]) -> FoodItem:
    """Build a FoodItem from a catalog entry dict.

    Nutrient keys are resolved through the nutrient registry.

    Raises:
        KeyError: If the entry lacks an id or cost, or names an unknown nutrient
        InvalidFoodError: If a cost, weight or amount is not a number
    """
    if not isinstance(data, dict):
        raise InvalidFoodError(f"Catalog entry must be a mapping, got {data!r}")
    food_id = data["id"]
    try:
        nutrients = {
            get_nutrient_key(name): float(amount)
            for name, amount in (data.get("nutrients") or {}).items()
        }
        unit_cost = float(data["cost"])
        serving_grams = float(data.get("serving_grams", 100.0))
    except (TypeError, ValueError, AttributeError) as e:
        raise InvalidFoodError(f"Food {food_id}: values must be numeric ({e})") from e
    return FoodItem(
        id=food_id,
        unit_cost=unit_cost,
        nutrients=nutrients,
        description=str(data.get("description", "")),
        serving_grams=serving_grams,
    )


def parse_requirements(data: dict[str, Any]) -> RequirementTable:
    """Build a RequirementTable from the profile format.

    The profile format is ``{"nutrients": {name: {"min": x, "max": y}}}``.

    Raises:
        KeyError: If a nutrient name is unknown
        InvalidRequirementError: If bounds are malformed
    """
    requirements = []
    for name, bounds in (data.get("nutrients") or {}).items():
        key = get_nutrient_key(name)
        if not isinstance(bounds, dict):
            bounds = {"min": bounds}
        min_val = bounds.get("min")
        max_val = bounds.get("max")
        try:
            min_val = float(min_val) if min_val is not None else 0.0
            max_val = float(max_val) if max_val is not None else None
        except (TypeError, ValueError) as e:
            raise InvalidRequirementError(f"{name}: bounds must be numeric ({e})") from e

        requirements.append(NutrientRequirement(name=key, min_value=min_val, max_value=max_val))
    return RequirementTable(requirements)


def load_catalog_from_yaml(yaml_path: Path) -> list[FoodItem]:
    """Parse a YAML food catalog into FoodItems.

    The file holds a top-level ``foods`` list; each entry has ``id``,
    ``cost`` (per unit), optional ``description`` and ``serving_grams``, and a
    ``nutrients`` mapping of per-unit contributions.

    Raises:
        FileNotFoundError: If file doesn't exist
        KeyError: If an entry is incomplete or a nutrient name is unknown
        InvalidFoodError: If the file is not valid YAML or holds bad values
    """
    try:
        data = _read_yaml_mapping(yaml_path)
    except ValueError as e:
        raise InvalidFoodError(str(e)) from e

    return [parse_food(entry) for entry in data.get("foods") or []]


def load_requirements_from_yaml(yaml_path: Path) -> RequirementTable:
    """Parse a YAML requirement profile into a RequirementTable.

    Raises:
        FileNotFoundError: If file doesn't exist
        KeyError: If nutrient name is unknown
        InvalidRequirementError: If the file is not valid YAML or holds bad bounds
    """
    try:
        data = _read_yaml_mapping(yaml_path)
    except ValueError as e:
        raise InvalidRequirementError(str(e)) from e

    return parse_requirements(data)


def _read_yaml_mapping(yaml_path: Path) -> dict[str, Any]:
    """Load a YAML file whose top level must be a mapping (empty file -> {})."""
    with open(yaml_path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"{yaml_path}: invalid YAML ({e})") from e
    if not isinstance(data, dict):
        raise ValueError(f"{yaml_path}: expected a mapping at the top level")
    return data
