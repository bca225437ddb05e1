from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from reelroll.models.catalog import Pick

# Ratings above this (0-10 scale) get the "fresh"/"upright" icon
RATING_ICON_THRESHOLD = 5.0


class Badge(BaseModel):
    text: str
    icon: str | None = None


class ResultCard(BaseModel):
    """Everything the reveal card shows for a pick."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    poster_url: str | None = None
    badges: list[Badge] = Field(default_factory=list)
    summary: str
    directors: list[str] = Field(default_factory=list)
    cast: list[str] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    direct_play_url: str
    fallback_url: str


def format_duration(duration_ms: int) -> str:
    """Format milliseconds as "2h 28m", or "45m" under an hour."""
    seconds = duration_ms // 1000
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_rating(rating: float) -> str:
    return f"{round(rating * 10)}%"


def build_result_card(pick: Pick) -> ResultCard:
    item = pick.item
    badges: list[Badge] = []

    if item.year:
        badges.append(Badge(text=str(item.year)))
    if item.leaf_count:
        badges.append(Badge(text=f"{item.leaf_count} episodes"))
    if item.content_rating:
        badges.append(Badge(text=item.content_rating))
    if item.critic_rating:
        icon = "critic-fresh" if item.critic_rating > RATING_ICON_THRESHOLD else "critic-rotten"
        badges.append(Badge(text=format_rating(item.critic_rating), icon=icon))
    if item.audience_rating:
        icon = "audience-upright" if item.audience_rating > RATING_ICON_THRESHOLD else "audience-spilled"
        badges.append(Badge(text=format_rating(item.audience_rating), icon=icon))
    if item.duration_ms:
        badges.append(Badge(text=format_duration(item.duration_ms)))

    return ResultCard(
        title=item.title or "Unknown Title",
        poster_url=pick.poster_url,
        badges=badges,
        summary=item.summary or "No summary available.",
        directors=list(item.directors),
        cast=list(item.cast),
        genres=list(item.genres),
        direct_play_url=pick.direct_play_url,
        fallback_url=pick.fallback_url,
    )
