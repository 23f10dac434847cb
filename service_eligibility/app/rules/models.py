"""
Data models for the Eligibility Service.

Domain records are dataclasses built from the registry's documents through
``from_dict``. The registry stores camelCase keys (``linkedItinerary``,
``permissionId``); both spellings are accepted on input and ``to_dict``
writes snake_case. Request and response bodies of the HTTP surface are
pydantic models.
"""

from typing import Dict, Any, Optional, List, Union
from dataclasses import dataclass, field, asdict
from enum import Enum

from pydantic import BaseModel, Field


class PackageCategory(str, Enum):
    """Market segments a package can be sold under."""
    APDC = "APDC"
    JCIM = "JCIM"
    INT = "Int"
    JP = "JP"
    KR = "KR"
    VIP = "VIP"


class GolfDay(str, Enum):
    """Tournament day a rule qualifies a golfer for."""
    DAY1 = "Day1"
    DAY2 = "Day2"

    @classmethod
    def for_day(cls, day: int) -> Optional["GolfDay"]:
        return {1: cls.DAY1, 2: cls.DAY2}.get(day)


class GrantType(str, Enum):
    """How an event permission was granted."""
    DIRECT = "direct"
    LINKED = "linked"


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def normalize_linked_events(value: Union[None, str, List[str], tuple]) -> List[str]:
    """Normalize a stored linked-itinerary value to a list of event ids.

    Older documents hold a single id string; newer ones a list.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, (list, tuple, set)):
        return [str(v) for v in value if v]
    return []


@dataclass
class Rule:
    """Named grant within a package category (PermissionMeta)."""
    id: str
    name: str
    date: str = ""
    linked_events: List[str] = field(default_factory=list)
    golf_type: Optional[GolfDay] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rule":
        golf_type = _pick(data, "golf_type", "golfType")
        try:
            golf_day = GolfDay(golf_type) if golf_type else None
        except ValueError:
            golf_day = None
        return cls(
            id=str(data["id"]),
            name=str(_pick(data, "name", default="")),
            date=str(_pick(data, "date", default="")),
            linked_events=normalize_linked_events(_pick(data, "linked_events", "linkedItinerary")),
            golf_type=golf_day,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date,
            "linked_events": list(self.linked_events),
            "golf_type": self.golf_type.value if self.golf_type else None,
        }


@dataclass
class Package:
    """Purchasable admission tier."""
    code: str
    category: str
    permissions: Dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, code: str, data: Dict[str, Any]) -> "Package":
        permissions = data.get("permissions") or {}
        return cls(
            code=code,
            category=str(_pick(data, "category", default="")),
            permissions={str(k): v is True for k, v in permissions.items()},
        )

    def grants(self, rule_id: Optional[str]) -> bool:
        if not rule_id:
            return False
        return self.permissions.get(rule_id) is True

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "permissions": dict(self.permissions)}


@dataclass
class Event:
    """One itinerary entry (EventSchedule)."""
    id: str
    date: str = ""
    time: str = ""
    title: str = ""
    location: str = ""
    description: str = ""
    permission_id: str = ""
    category: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        return cls(
            id=str(data["id"]),
            date=str(_pick(data, "date", default="")),
            time=str(_pick(data, "time", default="")),
            title=str(_pick(data, "title", default="")),
            location=str(_pick(data, "location", default="")),
            description=str(_pick(data, "description", default="")),
            permission_id=str(_pick(data, "permission_id", "permissionId", default="")),
            category=str(_pick(data, "category", default="")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class GolfAssignment:
    """A delegate's flight details for one tournament day."""
    flight: str
    tee_time: str
    buggy: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["GolfAssignment"]:
        if not data:
            return None
        return cls(
            flight=str(_pick(data, "flight", default="")),
            tee_time=str(_pick(data, "tee_time", "teeTime", default="")),
            buggy=str(data.get("buggy") or ""),
        )


@dataclass
class Delegate:
    """Conference attendee (Guest)."""
    id: str
    name: str
    package: str = ""
    name_on_tag: str = ""
    gender: str = ""
    position: str = ""
    country: str = ""
    local_org: str = ""
    email: str = ""
    phone: str = ""
    passport_last4: str = ""
    is_golf_participant: bool = False
    golf_day1: Optional[GolfAssignment] = None
    golf_day2: Optional[GolfAssignment] = None
    welcome_dinner_table: Optional[str] = None
    gala_dinner_table: Optional[str] = None
    checked_in_events: Dict[str, str] = field(default_factory=dict)
    check_in_count: int = 0
    last_checked_in_event: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Delegate":
        return cls(
            id=str(data["id"]),
            name=str(_pick(data, "name", default="")),
            package=str(_pick(data, "package", default="")),
            name_on_tag=str(_pick(data, "name_on_tag", "nameOnTag", default="")),
            gender=str(_pick(data, "gender", default="")),
            position=str(_pick(data, "position", default="")),
            country=str(_pick(data, "country", default="")),
            local_org=str(_pick(data, "local_org", "localOrg", default="")),
            email=str(_pick(data, "email", default="")),
            phone=str(_pick(data, "phone", default="")),
            passport_last4=str(_pick(data, "passport_last4", "passportLast4", default="")),
            is_golf_participant=bool(_pick(data, "is_golf_participant", "isGolfParticipant", default=False)),
            golf_day1=GolfAssignment.from_dict(_pick(data, "golf_day1", "golfDay1")),
            golf_day2=GolfAssignment.from_dict(_pick(data, "golf_day2", "golfDay2")),
            welcome_dinner_table=_pick(data, "welcome_dinner_table", "welcomeDinnerTable"),
            gala_dinner_table=_pick(data, "gala_dinner_table", "galaDinnerTable"),
            checked_in_events=dict(_pick(data, "checked_in_events", "checkedInEvents", default={})),
            check_in_count=int(_pick(data, "check_in_count", "checkInCount", default=0)),
            last_checked_in_event=_pick(data, "last_checked_in_event", "lastCheckedInEvent"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class GolfGrouping:
    """Tee-time flight for one tournament day."""
    id: str
    day: int
    flight_number: str
    tee_time: str = ""
    buggy_number: Optional[str] = None
    players: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GolfGrouping":
        return cls(
            id=str(data["id"]),
            day=int(_pick(data, "day", default=0)),
            flight_number=str(_pick(data, "flight_number", "flightNumber", default="")),
            tee_time=str(_pick(data, "tee_time", "teeTime", default="")),
            buggy_number=_pick(data, "buggy_number", "buggyNumber"),
            players=[str(p) for p in data.get("players") or []],
        )

    def assignment(self) -> GolfAssignment:
        return GolfAssignment(flight=self.flight_number, tee_time=self.tee_time, buggy=self.buggy_number or "")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


PackageCatalog = Dict[str, Package]
RuleCatalog = Dict[str, List[Rule]]


def load_package_catalog(data: Dict[str, Dict[str, Any]]) -> PackageCatalog:
    """Build a package catalog from its stored document."""
    return {code: Package.from_dict(code, entry) for code, entry in (data or {}).items()}


def load_rule_catalog(data: Dict[str, List[Dict[str, Any]]]) -> RuleCatalog:
    """Build a per-category rule catalog from its stored document."""
    return {category: [Rule.from_dict(r) for r in rules or []] for category, rules in (data or {}).items()}


@dataclass
class EvaluationResult:
    """Result of an event eligibility evaluation."""
    allowed: bool
    reason: Optional[str] = None
    matched_rules: List[str] = field(default_factory=list)
    grant_type: Optional[GrantType] = None
    evaluation_time_ms: float = 0.0


class EligibilityCheckRequest(BaseModel):
    """Request model for an event eligibility check."""
    delegate_id: str = Field(..., description="Delegate ID")
    event_id: str = Field(..., description="Itinerary event ID")


class EligibilityCheckResponse(BaseModel):
    """Response model for an event eligibility check."""
    delegate_id: str
    event_id: str
    allowed: bool = Field(..., description="Whether the delegate may attend")
    reason: Optional[str] = Field(None, description="Reason for the decision")
    matched_rules: List[str] = Field(default_factory=list, description="Rule IDs that granted access")
    grant_type: Optional[GrantType] = None


class GolfEligibilityResponse(BaseModel):
    delegate_id: str
    day: int
    eligible: bool
    flight: Optional[Dict[str, Any]] = None


class CheckInRequest(BaseModel):
    """Scanned code or typed name at a check-in station."""
    query: str = Field(..., min_length=1, description="Delegate ID from the QR code, or part of a name")
    event_id: str = Field(..., description="Active event at the station")


class CheckInResponse(BaseModel):
    delegate_id: str
    delegate_name: str
    event_id: str
    checked_in_at: str
    check_in_count: int
    message: str = "Verification Success - Access Granted."


class RuleCreateRequest(BaseModel):
    """Request model for creating a rule."""
    name: str = Field(..., min_length=1, description="Rule name")
    date: str = Field("", description="Display date")
    linked_events: Union[List[str], str, None] = Field(None, description="Linked itinerary event IDs")
    golf_type: Optional[GolfDay] = Field(None, description="Golf day this rule qualifies for")


class RuleUpdateRequest(BaseModel):
    """Request model for updating a rule."""
    name: Optional[str] = None
    date: Optional[str] = None
    linked_events: Union[List[str], str, None] = None
    golf_type: Optional[GolfDay] = None
    clear_golf_type: bool = Field(False, description="Remove the golf tag")


class RuleResponse(BaseModel):
    """Response model for rule operations."""
    category: str
    id: str
    name: str
    date: str
    linked_events: List[str]
    golf_type: Optional[GolfDay] = None


class PackageCreateRequest(BaseModel):
    code: str = Field(..., min_length=1)
    category: PackageCategory


class PackageUpdateRequest(BaseModel):
    """Rename and/or recategorize a package."""
    code: Optional[str] = None
    category: Optional[PackageCategory] = None


class GrantUpdateRequest(BaseModel):
    granted: Optional[bool] = Field(None, description="Explicit value; omitted toggles the grant")


class PackageResponse(BaseModel):
    code: str
    category: str
    permissions: Dict[str, bool]


class GolfGroupingPayload(BaseModel):
    id: str
    day: int = Field(..., ge=1, le=2)
    flight_number: str
    tee_time: str = ""
    buggy_number: Optional[str] = None
    players: List[str] = Field(default_factory=list)


class EventPayload(BaseModel):
    """Itinerary entry as edited in the admin portal; the id comes from the path."""
    date: str = Field(..., description="DD.MM.YYYY")
    time: str = Field("", description="H:MM AM|PM, or free text such as 'All Day'")
    title: str = Field(..., min_length=1)
    location: str = ""
    description: str = ""
    permission_id: str = Field("", description="Grant key checked for direct access")
    category: str = ""


class DelegatePayload(BaseModel):
    """Registration fields of a delegate.

    Check-in history and golf flights are owned by the station and the flight
    editor and are kept as stored.
    """
    name: str = Field(..., min_length=1)
    package: str = Field(..., description="Package code; must exist in the catalog")
    name_on_tag: str = ""
    gender: str = ""
    position: str = ""
    country: str = ""
    local_org: str = ""
    email: str = ""
    phone: str = ""
    passport_last4: str = ""
    is_golf_participant: bool = False
    welcome_dinner_table: Optional[str] = None
    gala_dinner_table: Optional[str] = None
