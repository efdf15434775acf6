from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import GopherError, PollCancelled, PollTimeout

SERVICE_DEFAULT_MAX_RESULTS = 1000
SERVICE_MAX_RESULTS = 1000

OPERATIONS = [
    "searchbyquery",
    "getbyid",
    "getreplies",
    "getretweeters",
    "gettweets",
    "getmedia",
    "searchbyprofile",
    "getprofilebyid",
    "getfollowers",
    "getfollowing",
    "gettrends",
    "getspace",
    "searchbyfullarchive",
]

# Operations that take no query argument
QUERYLESS_OPERATIONS = {"gettrends"}


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_positive_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool) and v > 0


def _parse_timestamp(v: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(v.replace("Z", "+00:00"))
    except ValueError:
        return None


def validate_job_request(
    job_kind: Any,
    operation: Any,
    query: Any = "",
    max_results: Any = SERVICE_DEFAULT_MAX_RESULTS,
    count: Any = None,
    start_time: Any = None,
    end_time: Any = None,
) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    errors: List[str] = []

    if not _is_non_empty_str(job_kind):
        errors.append("Field 'job_kind' must be a non-empty string")

    if operation not in OPERATIONS:
        errors.append(f"Unsupported operation: {operation!r}")
    elif operation not in QUERYLESS_OPERATIONS and not _is_non_empty_str(query):
        errors.append(f"Field 'query' is required for operation '{operation}'")

    if not _is_positive_int(max_results):
        errors.append("Field 'max_results' must be a positive integer")
    elif max_results > SERVICE_MAX_RESULTS:
        errors.append(f"Field 'max_results' must not exceed {SERVICE_MAX_RESULTS}")

    if count is not None:
        if not _is_positive_int(count):
            errors.append("Field 'count' must be a positive integer if provided")
        elif count > SERVICE_MAX_RESULTS:
            errors.append(f"Field 'count' must not exceed {SERVICE_MAX_RESULTS}")

    parsed = {}
    for name, value in (("start_time", start_time), ("end_time", end_time)):
        if value is None:
            continue
        ts = _parse_timestamp(value) if isinstance(value, str) else None
        if ts is None:
            errors.append(f"Field '{name}' must be an ISO 8601 timestamp")
        else:
            parsed[name] = ts

    if len(parsed) == 2:
        try:
            if parsed["start_time"] > parsed["end_time"]:
                errors.append("Field 'start_time' must not be after 'end_time'")
        except TypeError:
            # naive vs aware timestamps
            errors.append("Fields 'start_time' and 'end_time' must both carry a timezone or neither")

    return errors


@dataclass(frozen=True)
class JobRequest:
    """One job-creation request; immutable once built."""

    job_kind: str
    operation: str
    query: str = ""
    max_results: int = SERVICE_DEFAULT_MAX_RESULTS
    count: Optional[int] = None
    next_cursor: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    def __post_init__(self):
        errors = validate_job_request(
            self.job_kind,
            self.operation,
            query=self.query,
            max_results=self.max_results,
            count=self.count,
            start_time=self.start_time,
            end_time=self.end_time,
        )
        if errors:
            raise ValueError("; ".join(errors))

    def to_payload(self) -> Dict[str, Any]:
        """Wire body for POST /search/live/<kind>. Empty optionals are omitted."""
        arguments: Dict[str, Any] = {"type": self.operation}
        if self.query:
            arguments["query"] = self.query
        arguments["max_results"] = self.max_results
        if self.count:
            arguments["count"] = self.count
        if self.next_cursor:
            arguments["next_cursor"] = self.next_cursor
        if self.start_time:
            arguments["start_time"] = self.start_time
        if self.end_time:
            arguments["end_time"] = self.end_time
        return {"type": self.job_kind, "arguments": arguments}


@dataclass(frozen=True)
class JobHandle:
    id: str
    job_kind: str


@dataclass
class ResultItem:
    id: str
    content: str
    metadata: Any = None
    score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "metadata": self.metadata,
            "score": self.score,
        }


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    SERVICE_ERROR = "service_error"
    TRANSPORT_ERROR = "transport_error"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


@dataclass
class PollOutcome:
    """
    Terminal result of a poll.

    Exactly one kind holds. ``items`` is always a list; it is only
    non-empty for SUCCESS. ``error`` is set for every other kind.
    """

    kind: OutcomeKind
    attempts: int
    items: List[ResultItem] = field(default_factory=list)
    error: Optional[GopherError] = None

    @classmethod
    def success(cls, items: List[ResultItem], attempts: int) -> "PollOutcome":
        return cls(OutcomeKind.SUCCESS, attempts, items=list(items))

    @classmethod
    def failed(cls, kind: OutcomeKind, error: GopherError, attempts: int) -> "PollOutcome":
        return cls(kind, attempts, error=error)

    @classmethod
    def timeout(cls, attempts: int) -> "PollOutcome":
        return cls(OutcomeKind.TIMEOUT, attempts, error=PollTimeout(attempts))

    @classmethod
    def cancelled(cls, attempts: int) -> "PollOutcome":
        return cls(OutcomeKind.CANCELLED, attempts, error=PollCancelled(attempts))

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def unwrap(self) -> List[ResultItem]:
        """Return the items, or raise the error carried by a failed outcome."""
        if self.error is not None:
            raise self.error
        return self.items


@dataclass
class SearchOutput:
    items: List[ResultItem] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"items": [item.to_dict() for item in self.items]}
        if self.error:
            data["error"] = self.error
        return data
