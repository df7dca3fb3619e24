import re
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from stashquery import settings

# Logstash @timestamp as produced by Kibana, e.g. 2024-01-31T23:59:59.999Z
TIMESTAMP_PATTERN = re.compile(
    r"20[0-9]{2}-(0[1-9]|1[012])-(0[1-9]|[12][0-9]|3[01])T[012][0-9]:[0-5][0-9]:[0-5][0-9]\.[0-9]{3}Z"
)
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

# Elasticsearch time units accepted for the scroll keep-alive
TIME_VALUE_PATTERN = re.compile(r"[0-9]+(nanos|micros|ms|s|m|h|d)")


def parse_timestamp(value: str) -> datetime:
    """Parse a validated timestamp string into a datetime."""
    return datetime.strptime(value, TIMESTAMP_FORMAT)


class ExportConfig(BaseModel):
    """Connection and runtime options for an export."""

    host: str = settings.ES_HOST
    port: int = settings.ES_PORT
    scheme: str = settings.ES_SCHEME
    request_timeout: int = settings.REQUEST_TIMEOUT
    flush_size: int = Field(default=settings.FLUSH_SIZE, gt=0)
    match_field: str = settings.MESSAGE_FIELD
    verbose: bool = False
    progress: bool = False

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"


class ExportRequest(BaseModel):
    """A single export: what to search for, where, and where to write it."""

    model_config = ConfigDict(frozen=True)

    query: Optional[str] = None
    tags: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    index_prefixes: list[str] = Field(default_factory=lambda: list(settings.INDEX_PREFIXES))
    scroll_size: int = Field(default=settings.SCROLL_SIZE, gt=0)
    scroll_time: str = settings.SCROLL_TIME
    output: Optional[Path] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_timestamp(cls, value: Optional[str]) -> Optional[str]:
        """Require the strict YYYY-MM-DDTHH:MM:SS.mmmZ form and a real instant."""
        if value is None:
            return value
        if not TIMESTAMP_PATTERN.fullmatch(value):
            raise ValueError(f"Improper date format entered: {value!r}")
        parse_timestamp(value)
        return value

    @field_validator("index_prefixes")
    @classmethod
    def default_prefixes(cls, value: list[str]) -> list[str]:
        return value or list(settings.INDEX_PREFIXES)

    @field_validator("scroll_time")
    @classmethod
    def validate_scroll_time(cls, value: str) -> str:
        if not TIME_VALUE_PATTERN.fullmatch(value):
            raise ValueError(f"Invalid scroll time: {value!r}")
        return value

    @model_validator(mode="after")
    def validate_range(self) -> "ExportRequest":
        if (self.start_date is None) != (self.end_date is None):
            raise ValueError("start_date and end_date must be given together")
        if self.has_date_range and parse_timestamp(self.end_date) < parse_timestamp(
            self.start_date
        ):
            raise ValueError(f"end_date {self.end_date} is before start_date {self.start_date}")
        return self

    @property
    def has_date_range(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    @property
    def start_day(self) -> Optional[date]:
        return parse_timestamp(self.start_date).date() if self.start_date else None

    @property
    def end_day(self) -> Optional[date]:
        return parse_timestamp(self.end_date).date() if self.end_date else None

    @property
    def query_string(self) -> str:
        """AND-join the user query, the tag filter and the timestamp range."""
        clauses = [clause for clause in (self.query, self.tags) if clause]
        if self.has_date_range:
            clauses.append(
                f"{settings.TIMESTAMP_FIELD}:[{self.start_date} TO {self.end_date}]"
            )
        return " AND ".join(clauses) or "*"


class SessionState(str, Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    EXHAUSTED = "exhausted"
    FAILED = "failed"
    CLOSED = "closed"


class ScrollCursor(BaseModel):
    scroll_id: str
    ttl: str


class HitPage(BaseModel):
    """One page of raw hits. An empty page marks the end of the results."""

    hits: list[dict[str, Any]] = Field(default_factory=list)
    total: int = 0
    cursor: ScrollCursor


class ExportOutcome(BaseModel):
    count: int = 0
    total: int = 0
    finished: bool = False
    indices: list[str] = Field(default_factory=list)
    output: Optional[Path] = None
