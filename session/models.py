"""Records kept by the local session store and mirrored to the hosted database."""

import json
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Optional


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_iso(value: str) -> datetime:
    """Parse an ISO timestamp, treating naive values as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class SessionData:
    id: str
    created_at: str
    team_name: Optional[str] = None
    input_method: Optional[str] = None   # custom | random | numbers
    device_type: Optional[str] = None    # mobile | desktop
    ip_address: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "SessionData":
        return cls(**{k: row.get(k) for k in cls.__dataclass_fields__})

    def to_row(self) -> dict:
        return asdict(self)


@dataclass
class WheelConfig:
    id: str
    session_id: str
    names: list
    created_at: str
    segment_count: int = field(default=0)

    def __post_init__(self):
        self.names = list(self.names)
        self.segment_count = len(self.names)

    @classmethod
    def from_row(cls, row: dict) -> "WheelConfig":
        return cls(
            id=row["id"],
            session_id=row["session_id"],
            names=json.loads(row["names"]),
            created_at=row["created_at"],
        )

    def to_row(self) -> dict:
        row = asdict(self)
        row["names"] = json.dumps(self.names)
        return row


@dataclass
class SpinRecord:
    id: str
    session_id: str
    config_id: str
    winner: str
    is_respin: bool
    spin_power: float
    timestamp: str
    final_rotation: float = 0.0
    acknowledged_at: Optional[str] = None
    acknowledge_method: Optional[str] = None  # button | backdrop | x | remove

    @classmethod
    def from_row(cls, row: dict) -> "SpinRecord":
        return cls(
            id=row["id"],
            session_id=row["session_id"],
            config_id=row["configuration_id"],
            winner=row["winner"],
            is_respin=bool(row["is_respin"]),
            spin_power=float(row["spin_power"]),
            timestamp=row["spin_timestamp"],
            final_rotation=float(row.get("final_rotation") or 0.0),
            acknowledged_at=row.get("acknowledged_at"),
            acknowledge_method=row.get("acknowledge_method"),
        )

    def to_row(self) -> dict:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "configuration_id": self.config_id,
            "winner": self.winner,
            "is_respin": int(self.is_respin),
            "spin_power": self.spin_power,
            "final_rotation": self.final_rotation,
            "spin_timestamp": self.timestamp,
            "acknowledged_at": self.acknowledged_at,
            "acknowledge_method": self.acknowledge_method,
        }


@dataclass
class SyncSnapshot:
    session: SessionData
    configurations: list
    spins: list


@dataclass
class ShareableWheelConfig:
    id: str
    names: list
    slug: str
    created_at: str
    team_name: Optional[str] = None
    input_method: Optional[str] = None

    @classmethod
    def from_remote(cls, row: dict) -> "ShareableWheelConfig":
        return cls(
            id=row["id"],
            names=list(row.get("names") or []),
            slug=row["slug"],
            created_at=row.get("created_at") or "",
            team_name=row.get("team_name"),
            input_method=row.get("input_method"),
        )
