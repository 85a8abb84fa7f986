JOURNAL_ENTRIES = "journal_entries"
MEALS = "meals"
WEEKLY_PLANS = "weekly_plans"
ENTITY_KINDS = (JOURNAL_ENTRIES, MEALS, WEEKLY_PLANS)

# URL segment of each kind on the backend API.
KIND_PATHS = {
    JOURNAL_ENTRIES: "journal-entries",
    MEALS: "meals",
    WEEKLY_PLANS: "weekly-plans",
}

MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")
MEAL_TYPE_LABELS = {
    "breakfast": "Breakfast",
    "lunch": "Lunch",
    "dinner": "Dinner",
    "snack": "Snack",
}
PLAN_SLOTS = {
    "breakfast": "breakfast",
    "lunch": "lunch",
    "dinner": "dinner",
    "snack": "snacks",
}
NUTRITION_FIELDS = ("calories", "protein", "carbs", "fat")

RATING_MIN = 1
RATING_MAX = 10
DEFAULT_RATING = 5

IMMUTABLE_FIELDS = ("id", "user_id", "created_at")
# One row per owner and value of this field; inserting again replaces it.
NATURAL_KEYS = {WEEKLY_PLANS: "week_start"}

CACHE_SNAPSHOT_PREFIX = "snapshot"
LOCAL_TABLE_PREFIX = "table"

DEFAULT_ASSISTANT_CONTEXT = "general assistance"
ASSISTANT_ENTRY_LIMIT = 5
