from backend.db_init import PLANS_TABLE
from backend.routes.crud import build_crud_router
from backend.schemas import WeeklyPlanCreate, WeeklyPlanPatch

router = build_crud_router(PLANS_TABLE, "weekly-plans", WeeklyPlanCreate, WeeklyPlanPatch, "Weekly plan")
