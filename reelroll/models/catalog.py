from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, model_validator
from pydantic.alias_generators import to_camel


class CatalogItem(BaseModel):
    """A normalized library item, independent of the payload format it came from."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(min_length=1, description="Opaque upstream key, e.g. /library/metadata/123")
    title: str | None = None
    kind: str | None = Field(default=None, description="Upstream item type (movie, show, ...)")
    section_id: int | None = None
    year: int | None = None
    summary: str | None = None
    content_rating: str | None = None
    critic_rating: float | None = Field(default=None, ge=0, le=10)
    audience_rating: float | None = Field(default=None, ge=0, le=10)
    duration_ms: NonNegativeInt | None = None
    leaf_count: NonNegativeInt | None = None
    directors: tuple[str, ...] = ()
    cast: tuple[str, ...] = ()
    genres: tuple[str, ...] = ()
    poster_source_path: str | None = None

    @property
    def rating_key(self) -> str:
        """Numeric id taken from the key path (last all-digit segment)."""
        for segment in reversed(self.id.strip("/").split("/")):
            if segment.isdigit():
                return segment
        return self.id.strip("/").rsplit("/", 1)[-1]


class SelectionPool(BaseModel):
    """Ordered, non-empty, immutable set of candidates for one spin."""

    model_config = ConfigDict(frozen=True)

    items: tuple[CatalogItem, ...] = Field(min_length=1)

    @model_validator(mode="after")
    def _unique_ids(self) -> "SelectionPool":
        seen: set[str] = set()
        for item in self.items:
            if item.id in seen:
                raise ValueError(f"Duplicate item id in pool: {item.id}")
            seen.add(item.id)
        return self

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> CatalogItem:
        return self.items[index]

    def belt(self, copies: int = 3) -> tuple[CatalogItem, ...]:
        """The pool repeated end to end, as rendered on the spin strip."""
        return self.items * copies


class Pick(BaseModel):
    """The authoritative result of one draw."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    item: CatalogItem
    pool_index: NonNegativeInt
    direct_play_url: str
    fallback_url: str
    poster_url: str | None = None

    def matches(self, pool: SelectionPool) -> bool:
        return self.pool_index < len(pool) and pool[self.pool_index].id == self.item.id


class FetchStatus(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass
class SectionFetchResult:
    """Outcome of fetching and normalizing one library section."""

    section_id: int
    status: FetchStatus
    items: list[CatalogItem] = field(default_factory=list)
    error_message: str | None = None
    duration_ms: int = 0

    @property
    def is_success(self) -> bool:
        return self.status in (FetchStatus.SUCCESS, FetchStatus.EMPTY)

    @classmethod
    def success(cls, section_id: int, items: list[CatalogItem], duration_ms: int = 0) -> "SectionFetchResult":
        status = FetchStatus.SUCCESS if items else FetchStatus.EMPTY
        return cls(section_id=section_id, status=status, items=items, duration_ms=duration_ms)

    @classmethod
    def failed(cls, section_id: int, error_message: str, duration_ms: int = 0) -> "SectionFetchResult":
        return cls(
            section_id=section_id,
            status=FetchStatus.FAILED,
            error_message=error_message,
            duration_ms=duration_ms,
        )
