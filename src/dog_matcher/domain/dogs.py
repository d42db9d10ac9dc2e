"""Catalog payload models."""

from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from dog_matcher.domain.errors import ApiError


class DogRecord(BaseModel):
    """Single adoptable dog returned by the catalog."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    image_url: str = Field(alias="img")
    name: str
    age_years: int = Field(alias="age", ge=0)
    zip_code: str
    breed: str


class Location(BaseModel):
    """Geocoded ZIP code."""

    model_config = ConfigDict(frozen=True)

    zip_code: str
    latitude: float
    longitude: float
    city: str
    state: str
    county: str | None = None

    @property
    def label(self) -> str:
        """Return a short display label such as "Austin, TX"."""
        return f"{self.city}, {self.state}"


class SearchPage(BaseModel):
    """One page of ranked dog ids from the search endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    dog_ids: tuple[str, ...] = Field(alias="resultIds", default=())
    total: int = Field(default=0, ge=0)
    next_cursor: str | None = Field(alias="next", default=None)
    prev_cursor: str | None = Field(alias="prev", default=None)

    @property
    def has_next(self) -> bool:
        """Return True when a following page exists."""
        return bool(self.next_cursor)

    @property
    def has_previous(self) -> bool:
        """Return True when a preceding page exists."""
        return bool(self.prev_cursor)


class MatchResult(BaseModel):
    """Response of the matching endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    matched_dog_id: str | None = Field(alias="match", default=None)


ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_payload(model: type[ModelT], payload: object, endpoint: str) -> ModelT:
    """Validate a raw API payload, reporting malformed data as an API error."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ApiError(f"Malformed response from {endpoint}", 200, endpoint) from exc


def parse_payload_list(
    model: type[ModelT], payload: object, endpoint: str
) -> list[ModelT]:
    """Validate a raw API list payload item by item."""
    if not isinstance(payload, list):
        raise ApiError(f"Malformed response from {endpoint}", 200, endpoint)
    return [parse_payload(model, item, endpoint) for item in payload]
