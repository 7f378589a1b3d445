"""
Local-first session store. Every operation returns immediately against the
SQLite file; the hosted database only ever sees data through DatabaseSync.
"""

import re
import uuid
import sqlite3
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Sequence

from config import DB_PATH, SESSION_EXPIRY_DAYS
from db.connection import fetch_one, fetch_all, insert_row, update_row, execute
from db.schema import create_all_tables
from session.models import (
    SessionData, WheelConfig, SpinRecord, SyncSnapshot, utc_now_iso, parse_iso,
)
from utils.constants import INPUT_METHODS, ACKNOWLEDGE_METHODS
from utils.geolocation import get_ip_address

logger = logging.getLogger(__name__)

MOBILE_AGENT = re.compile(r"Mobile|Android|iPhone", re.IGNORECASE)


def detect_device_type(user_agent: Optional[str]) -> str:
    if user_agent and MOBILE_AGENT.search(user_agent):
        return "mobile"
    return "desktop"


class LocalSession:

    def __init__(self, db_path: str = DB_PATH, user_agent: Optional[str] = None,
                 now: Optional[Callable[[], datetime]] = None):
        self.db_path = db_path
        self.user_agent = user_agent
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._listeners: list = []
        create_all_tables(db_path)
        self.session = self._load_or_create_session()

    # ── Session lifecycle ────────────────────────────────────────────

    def _timestamp(self) -> str:
        return self._now().isoformat()

    def _is_session_valid(self, session: SessionData) -> bool:
        if not session.id or not session.created_at:
            return False
        age = self._now() - parse_iso(session.created_at)
        return age < timedelta(days=SESSION_EXPIRY_DAYS)

    def _load_or_create_session(self) -> SessionData:
        try:
            row = fetch_one(
                "SELECT * FROM sessions ORDER BY rowid DESC LIMIT 1",
                self.db_path,
            )
            if row:
                stored = SessionData.from_row(row)
                if self._is_session_valid(stored):
                    logger.info(f"Resumed session {stored.id}")
                    return stored
                logger.info(f"Session {stored.id} expired, starting a new one")
        except (sqlite3.DatabaseError, ValueError, TypeError) as e:
            logger.warning(f"Failed to load stored session: {e}")

        session = SessionData(
            id=str(uuid.uuid4()),
            created_at=self._timestamp(),
            device_type=detect_device_type(self.user_agent),
        )
        insert_row("sessions", session.to_row(), self.db_path)
        logger.info(f"Created session {session.id}")
        return session

    def _save_session(self):
        self.session.updated_at = self._timestamp()
        values = self.session.to_row()
        values.pop("id")
        update_row("sessions", "id", self.session.id, values, self.db_path)

    def initialize_location_data(self, lookup: Callable[[], Optional[str]] = get_ip_address):
        """Fill in the session's IP address if it is missing. Never fails."""
        if self.session.ip_address:
            return
        ip_address = lookup()
        if ip_address:
            self.session.ip_address = ip_address
            self._save_session()
            self._notify_change()

    # ── Change notification ─────────────────────────────────────────

    def add_change_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a callback run after every mutation. Returns a function that removes it."""
        self._listeners.append(listener)

        def remove():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return remove

    def _notify_change(self):
        for listener in list(self._listeners):
            listener()

    # ── Public API ──────────────────────────────────────────────────

    def get_session_id(self) -> str:
        return self.session.id

    def get_session_data(self) -> SessionData:
        return SessionData(**self.session.to_row())

    def save_configuration(self, names: Sequence[str], team_name: Optional[str] = None,
                           input_method: Optional[str] = None) -> str:
        """Store a wheel configuration and return its id."""
        if input_method is not None and input_method not in INPUT_METHODS:
            raise ValueError(f"Unknown input method: {input_method}")
        if team_name is not None or input_method is not None:
            if team_name is not None:
                self.session.team_name = team_name
            if input_method is not None:
                self.session.input_method = input_method
            self._save_session()

        config = WheelConfig(
            id=str(uuid.uuid4()),
            session_id=self.session.id,
            names=list(names),
            created_at=self._timestamp(),
        )
        insert_row("wheel_configurations", config.to_row(), self.db_path)
        logger.info(f"Saved configuration {config.id} ({config.segment_count} names)")
        self._notify_change()
        return config.id

    def record_spin(self, config_id: str, winner: str, is_respin: bool, spin_power: float,
                    final_rotation: float = 0.0) -> str:
        """Store a spin result and return its id."""
        spin = SpinRecord(
            id=str(uuid.uuid4()),
            session_id=self.session.id,
            config_id=config_id,
            winner=winner,
            is_respin=bool(is_respin),
            spin_power=float(spin_power),
            timestamp=self._timestamp(),
            final_rotation=float(final_rotation),
        )
        insert_row("spin_results", spin.to_row(), self.db_path)
        logger.info(f"Recorded spin {spin.id}: {winner}{' (respin)' if is_respin else ''}")
        self._notify_change()
        return spin.id

    def update_spin_acknowledgment(self, spin_id: str, method: str):
        """Mark how the winner popup was dismissed. Unknown spin ids are ignored."""
        if method not in ACKNOWLEDGE_METHODS:
            raise ValueError(f"Unknown acknowledge method: {method}")
        updated = update_row(
            "spin_results", "id", spin_id,
            {"acknowledged_at": self._timestamp(), "acknowledge_method": method},
            self.db_path,
        )
        if updated:
            self._notify_change()
        else:
            logger.debug(f"No spin {spin_id} to acknowledge")

    def get_spin_history(self) -> list[SpinRecord]:
        """Spins of this session, newest first."""
        rows = fetch_all(
            "SELECT * FROM spin_results WHERE session_id = ? "
            "ORDER BY spin_timestamp DESC, rowid DESC",
            self.db_path, [self.session.id],
        )
        return [SpinRecord.from_row(r) for r in rows]

    def get_configurations(self) -> list[WheelConfig]:
        rows = fetch_all(
            "SELECT * FROM wheel_configurations WHERE session_id = ? "
            "ORDER BY created_at, rowid",
            self.db_path, [self.session.id],
        )
        return [WheelConfig.from_row(r) for r in rows]

    def get_current_configuration(self) -> Optional[WheelConfig]:
        configs = self.get_configurations()
        return configs[-1] if configs else None

    def current_rotation(self) -> float:
        """Resting angle left by the last spin, so the next spin chains from it."""
        history = self.get_spin_history()
        return history[0].final_rotation if history else 0.0

    def clear(self):
        """Drop this session's configurations and spins."""
        execute("DELETE FROM spin_results WHERE session_id = ?", self.db_path, [self.session.id])
        execute("DELETE FROM wheel_configurations WHERE session_id = ?", self.db_path, [self.session.id])
        logger.info(f"Cleared session {self.session.id}")
        self._notify_change()

    def get_data_for_sync(self) -> SyncSnapshot:
        return SyncSnapshot(
            session=self.get_session_data(),
            configurations=self.get_configurations(),
            spins=list(reversed(self.get_spin_history())),
        )
