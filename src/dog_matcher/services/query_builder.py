"""Translate filter state into search query parameters."""

from dataclasses import dataclass
from urllib.parse import urlencode

from dog_matcher.domain.search import FilterState

DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class QueryRequest:
    """Ordered query parameters for the dog search endpoint."""

    params: tuple[tuple[str, str], ...]

    @property
    def key(self) -> str:
        """Return the canonical query string used to tag requests."""
        return urlencode(self.params, safe=":")


def build_query(
    filter_state: FilterState, page_size: int = DEFAULT_PAGE_SIZE
) -> QueryRequest:
    """Build the search query for a filter state.

    Parameters are emitted in a fixed order (breeds, zipCodes, sort, size,
    from) so equal filters always produce the same key.
    """
    params: list[tuple[str, str]] = [("breeds", breed) for breed in filter_state.breeds]
    params.extend(("zipCodes", zip_code) for zip_code in filter_state.zip_codes)
    params.append(("sort", str(filter_state.sort)))
    params.append(("size", str(page_size)))
    if filter_state.cursor:
        params.append(("from", filter_state.cursor))
    return QueryRequest(params=tuple(params))
