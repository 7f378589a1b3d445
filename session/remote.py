"""
Hosted database adapter. Talks to Supabase's PostgREST endpoint
(<SUPABASE_URL>/rest/v1/<table>) with the anonymous key.

Calls raise RemoteStoreError on failure so the sync queue can retry them;
duplicate-key and check-constraint rejections are final and count as done.
"""

import logging
from functools import lru_cache
from typing import Optional

import requests

from config import (
    SUPABASE_URL, SUPABASE_ANON_KEY, SUPABASE_PLACEHOLDERS, REMOTE_TIMEOUT,
    REMOTE_TABLES, IGNORED_CONSTRAINT_CODES, USER_AGENT_MAX_LENGTH,
)
from session.models import utc_now_iso

logger = logging.getLogger(__name__)


class RemoteStoreError(Exception):
    """A hosted-database call failed and may be retried."""

    def __init__(self, message: str, code: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.status = status


def is_configured(url: str, key: str) -> bool:
    if not url or not key:
        return False
    return url not in SUPABASE_PLACEHOLDERS and key not in SUPABASE_PLACEHOLDERS


def _db_ack_method(method: Optional[str]) -> Optional[str]:
    # The hosted check constraint predates the "remove" dismissal
    return "button" if method == "remove" else method


class SupabaseAdapter:
    """Insert/update/select helpers for the sessions, wheel_configurations and spin_results tables."""

    def __init__(self, url: str = SUPABASE_URL, anon_key: str = SUPABASE_ANON_KEY,
                 timeout: float = REMOTE_TIMEOUT, http=None, user_agent: Optional[str] = None):
        self.url = (url or "").rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.user_agent = user_agent
        self.http = None
        if is_configured(self.url, anon_key):
            self.http = http or requests.Session()
            logger.info("Supabase adapter initialized")
        else:
            logger.info("Supabase not configured - running in local-only mode")

    def is_ready(self) -> bool:
        return self.http is not None

    # ── HTTP plumbing ───────────────────────────────────────────────

    def _headers(self, prefer: Optional[str] = None) -> dict:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self.anon_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _request(self, method: str, table: str, params: Optional[dict] = None,
                 payload=None, prefer: Optional[str] = None,
                 allow_constraint_errors: bool = False):
        """Send one PostgREST request. Returns the response, or None for an ignored constraint error."""
        if not self.is_ready():
            raise RemoteStoreError("Supabase is not configured")
        url = f"{self.url}/rest/v1/{table}"
        try:
            resp = self.http.request(
                method, url, params=params, json=payload,
                headers=self._headers(prefer), timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RemoteStoreError(f"{method} {table} failed: {e}") from e

        if resp.status_code >= 400:
            code, message = None, resp.text
            try:
                body = resp.json()
                code = body.get("code")
                message = body.get("message", message)
            except ValueError:
                pass
            if allow_constraint_errors and code in IGNORED_CONSTRAINT_CODES:
                logger.debug(f"{method} {table}: constraint {code} ignored ({message})")
                return None
            raise RemoteStoreError(
                f"{method} {table} returned {resp.status_code}: {message}",
                code=code, status=resp.status_code,
            )
        return resp

    def insert(self, table: str, rows, returning: bool = False,
               allow_constraint_errors: bool = True):
        prefer = "return=representation" if returning else "return=minimal"
        resp = self._request("POST", table, payload=rows, prefer=prefer,
                             allow_constraint_errors=allow_constraint_errors)
        if returning and resp is not None:
            return resp.json()
        return None

    def update(self, table: str, match: dict, values: dict, returning: bool = False,
               allow_constraint_errors: bool = True):
        params = {col: f"eq.{val}" for col, val in match.items()}
        prefer = "return=representation" if returning else "return=minimal"
        resp = self._request("PATCH", table, params=params, payload=values, prefer=prefer,
                             allow_constraint_errors=allow_constraint_errors)
        if returning and resp is not None:
            return resp.json()
        return None

    def select(self, table: str, columns: str = "*", match: Optional[dict] = None,
               limit: Optional[int] = None) -> list:
        params = {"select": columns}
        for col, val in (match or {}).items():
            params[col] = f"eq.{str(val).lower() if isinstance(val, bool) else val}"
        if limit is not None:
            params["limit"] = str(limit)
        return self._request("GET", table, params=params).json()

    def count(self, table: str) -> int:
        resp = self._request("HEAD", table, params={"select": "id"}, prefer="count=exact")
        # Content-Range: 0-24/3573 or */0
        content_range = resp.headers.get("Content-Range", "")
        total = content_range.rsplit("/", 1)[-1]
        return int(total) if total.isdigit() else 0

    # ── Session sync operations ────────────────────────────────────

    def insert_session(self, session: dict):
        self.insert("sessions", [{
            "id": session["id"],
            "team_name": session.get("team_name") or None,
            "input_method": session.get("input_method") or None,
            "device_type": session.get("device_type") or None,
            "user_agent": self.user_agent[:USER_AGENT_MAX_LENGTH] if self.user_agent else None,
            "ip_address": session.get("ip_address") or None,
            "created_at": session["created_at"],
        }])

    def update_session(self, session_id: str, session: dict):
        self.update("sessions", {"id": session_id}, {
            "team_name": session.get("team_name") or None,
            "input_method": session.get("input_method") or None,
            "ip_address": session.get("ip_address") or None,
            "updated_at": utc_now_iso(),
        })

    def insert_configuration(self, config: dict):
        self.insert("wheel_configurations", [{
            "id": config["id"],
            "session_id": config["session_id"],
            "names": list(config["names"]),
            "segment_count": config["segment_count"],
            "created_at": config["created_at"],
        }])

    def insert_spin(self, spin: dict):
        self.insert("spin_results", [{
            "id": spin["id"],
            "session_id": spin["session_id"],
            "configuration_id": spin["config_id"],
            "winner": spin["winner"],
            "is_respin": bool(spin["is_respin"]),
            "spin_power": spin["spin_power"],
            "spin_timestamp": spin["timestamp"],
            "acknowledged_at": spin.get("acknowledged_at"),
            "acknowledge_method": _db_ack_method(spin.get("acknowledge_method")),
        }])

    def update_spin(self, spin_id: str, acknowledged_at: Optional[str], acknowledge_method: Optional[str]):
        self.update("spin_results", {"id": spin_id}, {
            "acknowledged_at": acknowledged_at,
            "acknowledge_method": _db_ack_method(acknowledge_method),
        })

    # ── Diagnostics ─────────────────────────────────────────────────

    def test_connection(self) -> bool:
        if not self.is_ready():
            return False
        try:
            self.select("sessions", "id", limit=1)
        except RemoteStoreError as e:
            logger.error(f"Database connection test failed: {e}")
            return False
        logger.info("Database connection successful")
        return True

    def verify_schema(self) -> dict:
        """Which of the three tables are reachable."""
        results = {table: False for table in REMOTE_TABLES}
        if not self.is_ready():
            return results
        for table in REMOTE_TABLES:
            try:
                self.select(table, "id", limit=1)
                results[table] = True
            except RemoteStoreError as e:
                logger.warning(f"Table {table} not accessible: {e}")
        logger.info(f"Schema verification results: {results}")
        return results

    def get_stats(self) -> Optional[dict]:
        """Row counts per table, or None when unavailable."""
        if not self.is_ready():
            return None
        try:
            return {table: self.count(table) for table in REMOTE_TABLES}
        except RemoteStoreError as e:
            logger.error(f"Stats query failed: {e}")
            return None


@lru_cache(maxsize=1)
def get_adapter() -> SupabaseAdapter:
    """Process-wide adapter built from environment configuration."""
    return SupabaseAdapter()
