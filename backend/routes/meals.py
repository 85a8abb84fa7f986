from backend.db_init import MEALS_TABLE
from backend.routes.crud import build_crud_router
from backend.schemas import MealCreate, MealPatch

router = build_crud_router(MEALS_TABLE, "meals", MealCreate, MealPatch, "Meal")
