"""Nutrient definitions and built-in requirement tables."""

from dietlp.data.nutrient_ids import NUTRIENT_IDS, get_nutrient_key, get_nutrient_unit

__all__ = ["NUTRIENT_IDS", "get_nutrient_key", "get_nutrient_unit"]
