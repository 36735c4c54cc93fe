"""Nutrient registry: friendly names, USDA nutrient IDs and units.

Nutrient keys used throughout dietlp are the friendly names below. The USDA
FoodData Central IDs are kept so catalogs exported from that database can be
mapped onto them.
"""

from __future__ import annotations

import re

# Mapping from friendly names to USDA nutrient IDs
NUTRIENT_IDS: dict[str, int] = {
    # Macros
    "energy": 1008,  # kcal
    "protein": 1003,  # g
    "total_fat": 1004,  # g
    "carbohydrate": 1005,  # g
    "fiber": 1079,  # g
    "sugar": 2000,  # g
    # Minerals
    "calcium": 1087,  # mg
    "iron": 1089,  # mg
    "magnesium": 1090,  # mg
    "potassium": 1092,  # mg
    "sodium": 1093,  # mg
    "zinc": 1095,  # mg
    # Vitamins
    "vitamin_a": 1106,  # mcg RAE
    "vitamin_c": 1162,  # mg
    "vitamin_d": 1114,  # mcg
    "vitamin_b12": 1178,  # mcg
    "folate": 1177,  # mcg
    # Essential amino acids
    "histidine": 1221,  # g
    "isoleucine": 1212,  # g
    "leucine": 1213,  # g
    "lysine": 1214,  # g
    "methionine": 1215,  # g
    "phenylalanine": 1217,  # g
    "threonine": 1211,  # g
    "tryptophan": 1210,  # g
    "valine": 1219,  # g
}

NUTRIENT_UNITS: dict[str, str] = {
    "energy": "kcal",
    "protein": "g",
    "total_fat": "g",
    "carbohydrate": "g",
    "fiber": "g",
    "sugar": "g",
    "calcium": "mg",
    "iron": "mg",
    "magnesium": "mg",
    "potassium": "mg",
    "sodium": "mg",
    "zinc": "mg",
    "vitamin_a": "mcg",
    "vitamin_c": "mg",
    "vitamin_d": "mcg",
    "vitamin_b12": "mcg",
    "folate": "mcg",
    "histidine": "g",
    "isoleucine": "g",
    "leucine": "g",
    "lysine": "g",
    "methionine": "g",
    "phenylalanine": "g",
    "threonine": "g",
    "tryptophan": "g",
    "valine": "g",
}

NUTRIENT_DISPLAY_NAMES: dict[str, str] = {
    "energy": "Energy",
    "protein": "Protein",
    "total_fat": "Total Fat",
    "carbohydrate": "Carbohydrates",
    "fiber": "Fiber",
    "vitamin_a": "Vitamin A",
    "vitamin_c": "Vitamin C",
    "vitamin_d": "Vitamin D",
    "vitamin_b12": "Vitamin B12",
}

# Shorthand names accepted in profiles and catalogs
NUTRIENT_ALIASES: dict[str, str] = {
    "calories": "energy",
    "kcal": "energy",
    "fat": "total_fat",
    "carbs": "carbohydrate",
    "carbohydrates": "carbohydrate",
    "fibre": "fiber",
}

AMINO_ACIDS: frozenset[str] = frozenset(
    {
        "histidine",
        "isoleucine",
        "leucine",
        "lysine",
        "methionine",
        "phenylalanine",
        "threonine",
        "tryptophan",
        "valine",
    }
)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def normalize_nutrient_name(name: str) -> str:
    """Lower-case a nutrient name and turn camelCase, spaces and dashes into underscores."""
    snake = _CAMEL_BOUNDARY.sub("_", name.strip())
    return snake.lower().replace(" ", "_").replace("-", "_")


def get_nutrient_key(name: str) -> str:
    """Resolve a user-supplied nutrient name to its registry key.

    Args:
        name: Nutrient name (e.g., 'protein', 'vitaminC', 'carbs')

    Returns:
        Registry key (e.g., 'protein', 'vitamin_c', 'carbohydrate')

    Raises:
        KeyError: If nutrient name not found
    """
    key = normalize_nutrient_name(name)
    key = NUTRIENT_ALIASES.get(key, key)
    if key not in NUTRIENT_IDS:
        raise KeyError(
            f"Unknown nutrient: {name}. "
            f"Available nutrients: {', '.join(sorted(NUTRIENT_IDS.keys()))}"
        )
    return key


def get_nutrient_id(name: str) -> int:
    """Look up a USDA nutrient ID by name.

    Raises:
        KeyError: If nutrient name not found
    """
    return NUTRIENT_IDS[get_nutrient_key(name)]


def get_nutrient_unit(name: str) -> str:
    """Get the unit for a nutrient ('?' when unknown)."""
    return NUTRIENT_UNITS.get(name, "?")


def get_nutrient_display_name(name: str) -> str:
    """Get a user-friendly display name for a nutrient."""
    if name in NUTRIENT_DISPLAY_NAMES:
        return NUTRIENT_DISPLAY_NAMES[name]
    return name.replace("_", " ").title()
