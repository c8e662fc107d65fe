"""ASGI entrypoint for the meal insights API."""

from meal_insights.api.app import create_app
from meal_insights.containers import build_container

app = create_app(build_container())
