from dataclasses import dataclass, asdict
from typing import Any, Dict, Literal, Optional

ReportStatus = Literal["pending", "In Progress", "Completed"]


@dataclass(frozen=True)
class Report:
    """A report as the backend stored it (server-assigned id and timestamp)."""
    id: Any
    user_id: str
    location: str
    description: str
    status: ReportStatus
    created_at: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Report":
        return cls(
            id=row.get("id"),
            user_id=str(row.get("user_id", "")),
            location=row.get("location") or "",
            description=row.get("description") or "",
            status=row.get("status") or "pending",
            created_at=row.get("created_at") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LocationCandidate:
    display_name: str
    lat: float
    lon: float
    place_id: Optional[Any] = None

    @property
    def coordinates(self) -> tuple:
        return (self.lat, self.lon)


@dataclass(frozen=True)
class Profile:
    id: str
    name: str = ""
    phone: str = ""
    avatar_url: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, user_id: str, row: Optional[Dict[str, Any]]) -> "Profile":
        row = row or {}
        return cls(
            id=user_id,
            name=row.get("name") or "",
            phone=row.get("phone") or "",
            avatar_url=row.get("avatar_url"),
            updated_at=row.get("updated_at"),
        )
