"""Supabase repository for logged meals."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from meal_insights.domain.meals import FoodItem, Meal, MealType
from meal_insights.services.meal_window import MealLogRepository

_MEAL_COLUMNS = (
    "id, eaten_on, meal_type, meal_items(food_name, quantity, unit, position)"
)


@dataclass
class SupabaseMealLogRepository(MealLogRepository):
    """Supabase implementation for meals and their items."""

    client: Client

    def fetch_meals(self, user_id: UUID, start: date, end: date) -> list[Meal]:
        """Return meals eaten between start and end, both inclusive."""
        response = (
            self.client.table("meals")
            .select(_MEAL_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("eaten_on", start.isoformat())
            .lte("eaten_on", end.isoformat())
            .order("eaten_on", desc=False)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]

    def save_meal(self, user_id: UUID, meal: Meal) -> None:
        """Insert a meal row and its item rows."""
        response = (
            self.client.table("meals")
            .insert(
                {
                    "id": str(meal.id),
                    "user_id": str(user_id),
                    "eaten_on": meal.day.isoformat(),
                    "meal_type": meal.meal_type.value,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal")
        payload = [
            {
                "meal_id": str(meal.id),
                "food_name": item.name,
                "quantity": item.quantity,
                "unit": item.unit,
                "position": position,
            }
            for position, item in enumerate(meal.items)
        ]
        if not payload:
            return
        try:
            self.client.table("meal_items").insert(payload).execute()
        except Exception:
            self.client.table("meals").delete().eq("id", str(meal.id)).execute()
            raise


def _parse_meal(row: dict[str, object]) -> Meal:
    raw_items = sorted(
        row.get("meal_items") or [], key=lambda item: int(item.get("position") or 0)
    )
    return Meal(
        id=UUID(str(row["id"])),
        eaten_at=date.fromisoformat(str(row["eaten_on"])[:10]),
        meal_type=MealType(row["meal_type"]),
        items=tuple(
            FoodItem(
                name=str(item.get("food_name", "")),
                quantity=float(item.get("quantity", 0.0)),
                unit=str(item.get("unit", "")),
            )
            for item in raw_items
        ),
    )
