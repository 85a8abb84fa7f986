import logging
import threading
import weakref
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from journal.constants import KIND_PATHS
from journal.data.service import DataService
from journal.errors import NotFound, RemoteFailure, RemoteUnavailable, Unauthorized

logger = logging.getLogger(__name__)

DEFAULT_POLL_SECONDS = 5.0


def _build_session():
    session = requests.Session()
    retry = Retry(
        total=2,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=("GET", "POST", "PUT", "PATCH", "DELETE"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=10)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class PollingChannel:
    """Background thread that fires ``callback`` when a revision changes.

    A bound-method callback is held weakly: once its owner is garbage
    collected (for example a feed whose browser session ended without
    unmounting it) the channel stops itself.
    """

    def __init__(self, name, fetch_revision, callback, interval=DEFAULT_POLL_SECONDS):
        self.name = name
        self._fetch_revision = fetch_revision
        if getattr(callback, "__self__", None) is not None and hasattr(callback, "__func__"):
            self._callback_ref = weakref.WeakMethod(callback)
        else:
            self._callback_ref = lambda: callback
        self._interval = interval
        self._stop = threading.Event()
        self._revision = None
        self._thread = threading.Thread(target=self._run, name=f"changes-{name}", daemon=True)

    def _callback(self):
        callback = self._callback_ref()
        if callback is None:
            logger.info("Listener of %s changes is gone; stopping its channel", self.name)
            self.stop()
        return callback

    def start(self):
        try:
            self._revision = self._fetch_revision()
        except Exception as exc:
            logger.warning("Initial change revision for %s unavailable: %s", self.name, exc)
        self._thread.start()
        return self

    def poll_once(self):
        if self._callback() is None:
            return False
        revision = self._fetch_revision()
        if revision == self._revision:
            return False
        self._revision = revision
        callback = self._callback()
        if callback is not None and not self._stop.is_set():
            callback()
        return True

    def _run(self):
        while not self._stop.wait(self._interval):
            try:
                self.poll_once()
            except Exception as exc:
                logger.debug("Change poll for %s failed: %s", self.name, exc)

    def stop(self):
        self._stop.set()

    @property
    def stopped(self):
        return self._stop.is_set()


class ApiDataService(DataService):
    """HTTP client of the journal backend.

    Every request carries the signed-in user's id and the shared backend
    token; the backend scopes all rows to that user.
    """

    def __init__(self, base_url, token, user_getter=None, session=None, timeout=10, poll_interval=DEFAULT_POLL_SECONDS):
        super().__init__(user_getter)
        self.base_url = str(base_url or "").rstrip("/")
        self.token = token
        self.timeout = timeout
        self.poll_interval = poll_interval
        self._session = session or _build_session()

    def _path(self, table, row_id=None):
        try:
            segment = KIND_PATHS[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}")
        if row_id is None:
            return f"/v1/{segment}"
        return f"/v1/{segment}/{row_id}"

    def _headers(self, owner_id=None):
        session = self.current_user()
        if session is None:
            raise Unauthorized("No signed-in user for API request", status_code=401)
        if owner_id is not None and owner_id != session.user_id:
            raise Unauthorized("Owner does not match the signed-in user", status_code=403)
        return {
            "X-User-Email": session.user_id,
            "X-Backend-Token": self.token or "",
        }

    def request(self, method: str, path: str, owner_id=None, params: dict | None = None, json: dict | None = None) -> Any:
        if not self.base_url:
            raise RemoteUnavailable("API_BASE_URL not configured")
        headers = self._headers(owner_id)
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(
                method, url, params=params, json=json, headers=headers, timeout=self.timeout
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise RemoteUnavailable(f"Journal service unreachable: {exc}")
        except requests.RequestException as exc:
            raise RemoteFailure(f"Journal service request failed: {exc}")
        if not response.ok:
            try:
                detail = response.json()
            except Exception:
                detail = response.text
            message = f"API error {response.status_code} {response.reason}: {detail}"
            if response.status_code in (401, 403):
                raise Unauthorized(message, status_code=response.status_code)
            if response.status_code >= 500:
                raise RemoteUnavailable(message, status_code=response.status_code)
            raise RemoteFailure(message, status_code=response.status_code, details={"detail": detail})
        if response.status_code == 204:
            return None
        return response.json()

    def _row_request(self, table, row_id, method, owner_id, json=None):
        try:
            return self.request(method, self._path(table, row_id), owner_id=owner_id, json=json)
        except RemoteFailure as exc:
            if exc.status_code == 404:
                raise NotFound(table, row_id)
            raise

    def select(self, table, owner_id):
        payload = self.request("GET", self._path(table), owner_id=owner_id)
        return list((payload or {}).get("items", []))

    def select_one(self, table, owner_id, row_id):
        try:
            return self._row_request(table, row_id, "GET", owner_id)
        except NotFound:
            return None

    def insert(self, table, row):
        return self.request("POST", self._path(table), owner_id=row.get("user_id"), json=row)

    def update(self, table, owner_id, row_id, patch):
        return self._row_request(table, row_id, "PATCH", owner_id, json=patch)

    def delete(self, table, owner_id, row_id):
        try:
            self._row_request(table, row_id, "DELETE", owner_id)
        except NotFound:
            return False
        return True

    def revision(self, table):
        payload = self.request("GET", "/v1/changes", params={"table": table})
        return int((payload or {}).get("revision") or 0)

    def subscribe(self, table, callback):
        channel = PollingChannel(
            table,
            lambda: self.revision(table),
            callback,
            interval=self.poll_interval,
        ).start()
        return channel.stop
