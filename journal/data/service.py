from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
from uuid import uuid4


@dataclass(frozen=True)
class UserSession:
    user_id: str
    name: str = ""

    @property
    def display_name(self):
        if self.name:
            return self.name.split()[0]
        local = (self.user_id or "").split("@")[0].replace(".", " ").strip()
        return local.title() if local else "User"


def new_id() -> str:
    return uuid4().hex


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DataService:
    """Opaque CRUD + auth + change-notification API the adapter talks to.

    ``current_user`` must be evaluated on every call: the signed-in user can
    change between two calls.
    """

    def __init__(self, user_getter: Optional[Callable[[], Optional[UserSession]]] = None):
        self._user_getter = user_getter

    def current_user(self) -> Optional[UserSession]:
        if self._user_getter is None:
            return None
        return self._user_getter()

    def select(self, table: str, owner_id: str) -> List[Dict]:
        raise NotImplementedError

    def select_one(self, table: str, owner_id: str, row_id: str) -> Optional[Dict]:
        raise NotImplementedError

    def insert(self, table: str, row: Dict) -> Dict:
        raise NotImplementedError

    def update(self, table: str, owner_id: str, row_id: str, patch: Dict) -> Dict:
        """Apply ``patch``; raises ``NotFound`` when the owner has no such row."""
        raise NotImplementedError

    def delete(self, table: str, owner_id: str, row_id: str) -> bool:
        raise NotImplementedError

    def subscribe(self, table: str, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback`` for any change on ``table``; returns the teardown."""
        raise NotImplementedError
