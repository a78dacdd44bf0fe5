"""Core domain entities."""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class EntryType(str, Enum):
    """Kind of reading source."""

    BOOK = "Book"
    ARTICLE = "Article"
    SUBSTACK = "Substack"
    PAPER = "Research Paper"
    OTHER = "Other"


class SortOption(str, Enum):
    """Ordering of the entry list."""

    NEWEST = "newest"
    OLDEST = "oldest"
    AZ = "az"
    ZA = "za"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse ISO timestamp from storage into an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Format datetime for storage."""
    if value is None:
        return None
    return value.isoformat()


@dataclass
class EntryFormData:
    """Editable fields of an entry (everything except identity and timestamps)."""

    title: str = ""
    author: str = ""
    type: EntryType = EntryType.BOOK
    content: str = ""
    url: str = ""
    tags: list[str] = field(default_factory=list)
    ai_summary: str = ""
    cover_image: Optional[str] = None

    def validate(self) -> None:
        if not self.title.strip():
            raise ValueError("Title cannot be empty")
        if not self.content.strip():
            raise ValueError("Content cannot be empty")

    def to_dict(self) -> dict[str, Any]:
        """Row fields as sent to a store."""
        return {
            "title": self.title,
            "author": self.author,
            "type": self.type.value,
            "content": self.content,
            "url": self.url,
            "tags": list(self.tags),
            "ai_summary": self.ai_summary,
            "cover_image": self.cover_image,
        }


FORM_FIELDS = tuple(f.name for f in fields(EntryFormData))


@dataclass
class JournalEntry:
    """Persisted reading note owned by one user."""

    id: str
    user_id: str
    title: str
    type: EntryType
    content: str
    created_at: datetime
    author: Optional[str] = None
    url: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    ai_summary: Optional[str] = None
    cover_image: Optional[str] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Entry id cannot be empty")
        if not self.user_id:
            raise ValueError("Entry owner cannot be empty")

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "JournalEntry":
        """Build entry from a store row."""
        created_at = parse_timestamp(row.get("created_at"))
        if created_at is None:
            raise ValueError("Entry creation time cannot be empty")

        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            title=row.get("title") or "",
            author=row.get("author") or None,
            type=EntryType(row.get("type") or EntryType.OTHER.value),
            content=row.get("content") or "",
            url=row.get("url") or None,
            tags=list(row.get("tags") or []),
            ai_summary=row.get("ai_summary") or None,
            cover_image=row.get("cover_image") or None,
            created_at=created_at,
            updated_at=parse_timestamp(row.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Row representation shared by remote rows and the local blob."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "author": self.author,
            "type": self.type.value,
            "content": self.content,
            "url": self.url,
            "tags": list(self.tags),
            "ai_summary": self.ai_summary,
            "cover_image": self.cover_image,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }

    def to_form(self) -> EntryFormData:
        """Copy editable fields into form data."""
        return EntryFormData(
            title=self.title,
            author=self.author or "",
            type=self.type,
            content=self.content,
            url=self.url or "",
            tags=list(self.tags),
            ai_summary=self.ai_summary or "",
            cover_image=self.cover_image,
        )


@dataclass
class User:
    """Authenticated identity."""

    id: str
    email: str = ""


@dataclass
class Session:
    """Identity token bound to one user and an expiry."""

    access_token: str
    user: User
    expires_at: datetime
    refresh_token: Optional[str] = None
    token_type: str = "bearer"

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        user = data.get("user") or {}
        expires_at = parse_timestamp(data.get("expires_at"))
        if expires_at is None:
            raise ValueError("Session expiry cannot be empty")

        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            token_type=data.get("token_type", "bearer"),
            expires_at=expires_at,
            user=User(id=str(user["id"]), email=user.get("email") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": self.token_type,
            "expires_at": format_timestamp(self.expires_at),
            "user": {"id": self.user.id, "email": self.user.email},
        }


@dataclass
class AuthMessage:
    """Outcome of a login request, shown inline to the user."""

    kind: str
    text: str
    session: Optional[Session] = None

    @property
    def is_error(self) -> bool:
        return self.kind == "error"


@dataclass
class AiAnalysis:
    """Summary and topic tags produced by the LLM."""

    summary: str
    tags: list[str]


COVER_URL_TEMPLATE = "https://covers.openlibrary.org/b/id/{cover_id}-M.jpg"


@dataclass
class BookSuggestion:
    """Candidate returned by the book lookup."""

    title: str
    authors: list[str] = field(default_factory=list)
    first_publish_year: Optional[int] = None
    cover_id: Optional[int] = None
    covers_url: str = COVER_URL_TEMPLATE

    @property
    def author(self) -> str:
        return ", ".join(self.authors)

    @property
    def cover_url(self) -> Optional[str]:
        if self.cover_id is None:
            return None
        return self.covers_url.format(cover_id=self.cover_id)
