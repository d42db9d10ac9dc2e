"""Search filter domain models."""

import re
from dataclasses import dataclass, replace
from typing import Literal

from dog_matcher.domain.errors import InvalidSortError, InvalidZipFormatError

SortField = Literal["breed", "age", "name"]
SortDirection = Literal["asc", "desc"]

SORT_FIELDS: tuple[str, ...] = ("breed", "age", "name")
SORT_DIRECTIONS: tuple[str, ...] = ("asc", "desc")

_ZIP_PATTERN = re.compile(r"[0-9]{5}")


def is_valid_zip(zip_code: str) -> bool:
    """Return True for exactly five ASCII digits."""
    return _ZIP_PATTERN.fullmatch(zip_code) is not None


@dataclass(frozen=True)
class SortKey:
    """Sort field and direction, serialized as ``field:direction``."""

    field: SortField = "breed"
    direction: SortDirection = "asc"

    def __post_init__(self) -> None:
        if self.field not in SORT_FIELDS or self.direction not in SORT_DIRECTIONS:
            raise InvalidSortError(str(self))

    def __str__(self) -> str:
        return f"{self.field}:{self.direction}"

    @classmethod
    def parse(cls, raw: str) -> "SortKey":
        """Parse a ``field:direction`` string."""
        sort_field, _, direction = raw.strip().partition(":")
        return cls(
            field=sort_field,  # type: ignore[arg-type]
            direction=direction or "asc",  # type: ignore[arg-type]
        )


@dataclass(frozen=True)
class FilterState:
    """Immutable search criteria for one query.

    Every mutator returns a new value. Changing the filters resets the cursor
    to the first page; only ``with_cursor`` moves between pages.
    """

    breeds: tuple[str, ...] = ()
    zip_codes: tuple[str, ...] = ()
    sort: SortKey = SortKey()
    cursor: str | None = None

    def __post_init__(self) -> None:
        if len(set(self.breeds)) != len(self.breeds):
            raise ValueError("Duplicate breed in filter")
        if len(set(self.zip_codes)) != len(self.zip_codes):
            raise ValueError("Duplicate ZIP code in filter")
        for zip_code in self.zip_codes:
            if not is_valid_zip(zip_code):
                raise InvalidZipFormatError(zip_code)

    def with_breed(self, breed: str) -> "FilterState":
        """Return a filter that also includes ``breed``."""
        if breed in self.breeds:
            return self
        return replace(self, breeds=(*self.breeds, breed), cursor=None)

    def without_breed(self, breed: str) -> "FilterState":
        """Return a filter without ``breed``."""
        if breed not in self.breeds:
            return self
        remaining = tuple(item for item in self.breeds if item != breed)
        return replace(self, breeds=remaining, cursor=None)

    def with_zip(self, zip_code: str) -> "FilterState":
        """Return a filter that also includes ``zip_code``."""
        if zip_code in self.zip_codes:
            return self
        return replace(self, zip_codes=(*self.zip_codes, zip_code), cursor=None)

    def without_zip(self, zip_code: str) -> "FilterState":
        """Return a filter without ``zip_code``."""
        if zip_code not in self.zip_codes:
            return self
        remaining = tuple(item for item in self.zip_codes if item != zip_code)
        return replace(self, zip_codes=remaining, cursor=None)

    def with_sort(self, sort: SortKey) -> "FilterState":
        """Return a filter ordered by ``sort``."""
        if sort == self.sort:
            return self
        return replace(self, sort=sort, cursor=None)

    def with_cursor(self, cursor: str | None) -> "FilterState":
        """Return the same filter positioned at ``cursor``."""
        return replace(self, cursor=cursor or None)
