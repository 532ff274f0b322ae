"""Cache entry models for the metadata index, snapshots and read results."""

from datetime import datetime, timedelta

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    field_serializer,
    field_validator,
)

from simple_cache.models.common import _utc_now, from_epoch_millis, to_epoch_millis


def validate_cache_id(cache_id: str) -> str:
    """Validate a cache identifier.

    Identifiers are relative, '/'-separated paths such as "images/logo.png".

    Args:
        cache_id: Identifier to validate.

    Returns:
        The identifier, unchanged.

    Raises:
        ValueError: If the identifier is empty, absolute, or escapes its namespace.
    """
    if not isinstance(cache_id, str) or not cache_id:
        raise ValueError("Cache id must be a non-empty string")
    if "\x00" in cache_id or "\\" in cache_id:
        raise ValueError(f"Cache id contains an invalid character: {cache_id!r}")
    if cache_id.startswith("/"):
        raise ValueError(f"Cache id must be relative: {cache_id!r}")

    for segment in cache_id.split("/"):
        if segment in ("", ".", ".."):
            raise ValueError(f"Cache id has an invalid path segment: {cache_id!r}")
    return cache_id


def validate_namespace_id(namespace_id: str) -> str:
    """Validate a namespace identifier (a single path component)."""
    if not isinstance(namespace_id, str) or not namespace_id.strip():
        raise ValueError("Namespace id must be a non-empty string")
    if namespace_id in (".", "..") or any(c in namespace_id for c in ("/", "\\", "\x00")):
        raise ValueError(f"Invalid namespace id: {namespace_id!r}")
    return namespace_id


class CacheEntryMetadata(BaseModel):
    """Metadata index entry for one cached object.

    Serialized into the namespace snapshot as
    {"id": str, "created": epoch-millis, "expires": epoch-millis}; "expires"
    is omitted when the entry never expires.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Cache id, also the relative key into the content store")
    created: datetime = Field(default_factory=_utc_now, description="Write time (UTC)")
    expires: datetime | None = Field(default=None, description="Expiry time, None = never")

    @field_validator("created", "expires", mode="before")
    @classmethod
    def _parse_epoch_millis(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return from_epoch_millis(value)
        return value

    @field_serializer("created", "expires")
    def _serialize_epoch_millis(self, value: datetime | None) -> int | None:
        return to_epoch_millis(value) if value is not None else None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True if the entry has an expiry strictly before `now`."""
        if self.expires is None:
            return False
        return self.expires < (now or _utc_now())


class MetadataSnapshot(RootModel[dict[str, CacheEntryMetadata]]):
    """Whole-namespace metadata snapshot: cache id -> entry."""

    root: dict[str, CacheEntryMetadata] = Field(default_factory=dict)

    @classmethod
    def from_entries(cls, entries: dict[str, CacheEntryMetadata]) -> "MetadataSnapshot":
        """Build a snapshot with keys in sorted order."""
        return cls({key: entries[key] for key in sorted(entries)})

    def to_json_bytes(self) -> bytes:
        """Encode the snapshot; entries without expiry omit the field."""
        return self.model_dump_json(exclude_none=True).encode("utf-8")


class CacheObject(BaseModel):
    """Read-side view of a cached object, built fresh on every hit."""

    age: timedelta = Field(description="Time elapsed since the entry was written")
    expires: datetime | None = Field(default=None, description="Copied from metadata")
    data: bytes = Field(description="Content payload")

    @property
    def text(self) -> str:
        """Content decoded as UTF-8."""
        return self.data.decode("utf-8")

    @property
    def is_expired(self) -> bool:
        if self.expires is None:
            return False
        return self.expires < _utc_now()


class VirtualFile(BaseModel):
    """In-memory stand-in for a content file."""

    path: str
    modified: datetime = Field(default_factory=_utc_now)
    data: bytes = b""

    @property
    def text(self) -> str:
        return self.data.decode("utf-8")
