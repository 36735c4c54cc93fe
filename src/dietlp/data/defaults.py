"""Built-in daily requirement table for an adult.

Values follow WHO/FAO reference intakes for a moderately active adult,
expressed in the units of the nutrient registry.
"""

from __future__ import annotations

from dietlp.optimizer.models import NutrientRequirement, RequirementTable

WHO_REQUIREMENTS: RequirementTable = RequirementTable(
    [
        NutrientRequirement("energy", min_value=2000, max_value=2500),
        NutrientRequirement("protein", min_value=50),
        NutrientRequirement("carbohydrate", min_value=130),
        NutrientRequirement("total_fat", min_value=44),
        NutrientRequirement("fiber", min_value=25),
        NutrientRequirement("calcium", min_value=1000),
        NutrientRequirement("iron", min_value=18),
        NutrientRequirement("vitamin_c", min_value=90),
    ]
)
