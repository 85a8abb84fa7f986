from backend.db_init import JOURNAL_TABLE
from backend.routes.crud import build_crud_router
from backend.schemas import JournalEntryCreate, JournalEntryPatch

router = build_crud_router(JOURNAL_TABLE, "journal-entries", JournalEntryCreate, JournalEntryPatch, "Journal entry")
