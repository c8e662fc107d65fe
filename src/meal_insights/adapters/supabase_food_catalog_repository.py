"""Supabase repository for per-reference-unit food data."""

from dataclasses import dataclass

from supabase import Client

from meal_insights.domain.nutrition import CFGFoodGroup, FoodGroup, Nutrition
from meal_insights.services.nutrition import FoodCatalogRepository


@dataclass
class SupabaseFoodCatalogRepository(FoodCatalogRepository):
    """Reads nutrient and food-guide profiles of one reference unit."""

    client: Client

    def unit_nutrients(self, food_name: str, unit: str) -> Nutrition | None:
        """Return nutrients of one reference unit, or None if unknown."""
        response = (
            self.client.table("food_unit_nutrients")
            .select("nutrient_name, amount")
            .eq("food_name", food_name)
            .eq("unit", unit)
            .execute()
        )
        if not response.data:
            return None
        return Nutrition(
            {
                str(row["nutrient_name"]): float(row.get("amount") or 0.0)
                for row in response.data
            }
        )

    def unit_servings(self, food_name: str, unit: str) -> CFGFoodGroup | None:
        """Return food-guide servings of one reference unit, or None."""
        response = (
            self.client.table("food_unit_servings")
            .select(", ".join(group.value for group in FoodGroup))
            .eq("food_name", food_name)
            .eq("unit", unit)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return CFGFoodGroup(
            **{group.value: float(row.get(group.value) or 0.0) for group in FoodGroup}
        )

    def nutrient_unit(self, nutrient: str) -> str:
        """Return the unit label of a nutrient."""
        response = (
            self.client.table("nutrient_names")
            .select("nutrient_unit")
            .eq("nutrient_name", nutrient)
            .limit(1)
            .execute()
        )
        if not response.data:
            raise LookupError(f"Nutrient not found: {nutrient}")
        return str(response.data[0].get("nutrient_unit") or "")
