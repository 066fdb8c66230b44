"""Unified media models shared by every metadata provider.

Field names follow the TVmaze schema (which most consumers were written
against); TMDB payloads are mapped onto the same shapes by their adapter.
Upstream camelCase keys are accepted through aliases.
"""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ContentProviderName = Literal["tmdb", "tvmaze"]


class MediaModel(BaseModel):
    """Base for all unified models: immutable, alias-aware, extras ignored."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Country(MediaModel):
    name: str = ""
    code: str = ""
    timezone: Optional[str] = None

    @field_validator("name", "code", mode="before")
    @classmethod
    def _empty_text(cls, v: Any) -> Any:
        return "" if v is None else v


class Network(MediaModel):
    """A broadcast network or a web channel."""

    id: int = 0
    name: str
    country: Optional[Country] = None


class ShowSchedule(MediaModel):
    time: str = ""
    days: List[str] = []

    @field_validator("time", mode="before")
    @classmethod
    def _empty_time(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("days", mode="before")
    @classmethod
    def _empty_days(cls, v: Any) -> Any:
        return [] if v is None else v


class Rating(MediaModel):
    average: Optional[float] = None


class Image(MediaModel):
    medium: str
    original: str


class Link(MediaModel):
    href: str


class Links(MediaModel):
    self_: Optional[Link] = Field(default=None, alias="self")
    previousepisode: Optional[Link] = None
    nextepisode: Optional[Link] = None
    show: Optional[Link] = None


class Show(MediaModel):
    """A TV show, identified by (provider, id)."""

    id: int
    provider: ContentProviderName
    name: str = ""
    type: str = ""
    language: str = ""
    genres: List[str] = []
    status: str = ""  # free text, values differ per provider
    runtime: Optional[int] = None
    premiered: Optional[str] = None
    ended: Optional[str] = None
    official_site: Optional[str] = Field(default=None, alias="officialSite")
    schedule: ShowSchedule = ShowSchedule()
    rating: Rating = Rating()
    weight: int = 0
    network: Optional[Network] = None
    web_channel: Optional[Network] = Field(default=None, alias="webChannel")
    image: Optional[Image] = None
    summary: Optional[str] = None
    updated: int = 0
    season_count: Optional[int] = Field(default=None, alias="seasonCount")
    next_episode_air_date: Optional[str] = Field(
        default=None, alias="nextEpisodeAirDate"
    )
    links: Links = Field(default=Links(), alias="_links")

    @field_validator("name", "type", "language", "status", mode="before")
    @classmethod
    def _empty_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("genres", mode="before")
    @classmethod
    def _empty_genres(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("schedule", "rating", "links", mode="before")
    @classmethod
    def _empty_nested(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("updated", mode="before")
    @classmethod
    def _zero_updated(cls, v: Any) -> Any:
        return 0 if v is None else v

    @property
    def self_link(self) -> Optional[str]:
        return self.links.self_.href if self.links.self_ else None


class Episode(MediaModel):
    """An episode of a show.

    ``airdate`` is an ISO date or an empty string when the air date is not
    known. Unscheduled episodes are valid members of a full episode list but
    never belong in a date-bucketed view (see ``is_scheduled``).
    """

    id: int
    url: str = ""
    name: str = ""
    season: int = Field(ge=0)
    number: Optional[int] = None
    type: str = ""
    airdate: str = ""
    airtime: str = ""
    airstamp: str = ""
    runtime: Optional[int] = None
    rating: Rating = Rating()
    image: Optional[Image] = None
    summary: Optional[str] = None
    links: Links = Field(default=Links(), alias="_links")

    @field_validator(
        "url", "name", "type", "airdate", "airtime", "airstamp", mode="before"
    )
    @classmethod
    def _empty_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("rating", "links", mode="before")
    @classmethod
    def _empty_nested(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def is_scheduled(self) -> bool:
        return bool(self.airdate)


class ScheduleEntry(Episode):
    """An episode airing on a given day, with its show embedded.

    Entries flagged ``is_placeholder`` come from providers whose schedule is
    show-level only; they carry no real episode identity (empty name, no
    number, season 0).
    """

    show: Show
    is_placeholder: bool = False

    @model_validator(mode="before")
    @classmethod
    def _lift_embedded_show(cls, data: Any) -> Any:
        # Web schedule payloads nest the show under _embedded.show
        if isinstance(data, dict) and not data.get("show"):
            embedded = data.get("_embedded") or {}
            if embedded.get("show"):
                data = {**data, "show": embedded["show"]}
        return data


class SearchResult(MediaModel):
    """A show search hit."""

    score: float = 0.0
    show: Show


class ImageResolution(MediaModel):
    url: str
    width: int = 0
    height: int = 0

    @field_validator("width", "height", mode="before")
    @classmethod
    def _zero_size(cls, v: Any) -> Any:
        return 0 if v is None else v


class ImageResolutions(MediaModel):
    original: Optional[ImageResolution] = None
    medium: Optional[ImageResolution] = None


class ShowImage(MediaModel):
    """A piece of show artwork available in one or more resolutions."""

    id: int
    type: str = ""
    main: bool = False
    resolutions: ImageResolutions = ImageResolutions()

    @field_validator("type", mode="before")
    @classmethod
    def _empty_type(cls, v: Any) -> Any:
        return "" if v is None else v
