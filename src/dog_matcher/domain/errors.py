"""Typed errors raised by the dog matcher core."""

HTTP_UNAUTHORIZED = 401


class DogMatcherError(Exception):
    """Base class for every error surfaced to action handlers."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidZipFormatError(DogMatcherError):
    """ZIP code is not exactly five digits."""

    kind = "invalid_format"

    def __init__(self, zip_code: str) -> None:
        super().__init__("ZIP code must be 5 digits")
        self.zip_code = zip_code


class UnknownZipError(DogMatcherError):
    """Geocoding returned no location for the ZIP code."""

    kind = "unknown_zip"

    def __init__(self, zip_code: str) -> None:
        super().__init__("Invalid ZIP code. Please enter a valid US ZIP code.")
        self.zip_code = zip_code


class UnknownBreedError(DogMatcherError):
    """Breed is not part of the catalog's breed list."""

    kind = "unknown_breed"

    def __init__(self, breed: str) -> None:
        super().__init__(f"Unknown breed: {breed}")
        self.breed = breed


class InvalidSortError(DogMatcherError):
    """Sort string is not one of the supported field:direction pairs."""

    kind = "invalid_sort"

    def __init__(self, raw: str) -> None:
        super().__init__(f"Unsupported sort order: {raw}")
        self.raw = raw


class InvalidCredentialsError(DogMatcherError):
    """Login form values failed local validation."""

    kind = "invalid_credentials"


class NoFavoritesSelectedError(DogMatcherError):
    """Match was requested with an empty favorite set."""

    kind = "no_favorites_selected"

    def __init__(self) -> None:
        super().__init__("Please select at least one favorite dog")


class NoMatchFoundError(DogMatcherError):
    """Matching endpoint answered without a match id."""

    kind = "no_match_found"

    def __init__(self) -> None:
        super().__init__("No match was found. Try selecting different dogs.")


class MatchRecordMissingError(DogMatcherError):
    """Matched id could not be hydrated into a dog record."""

    kind = "match_record_missing"

    def __init__(self, dog_id: str) -> None:
        super().__init__("Could not retrieve details for your matched dog.")
        self.dog_id = dog_id


class ApiError(DogMatcherError):
    """Catalog API answered with a non-2xx status."""

    kind = "api_error"

    def __init__(self, message: str, status_code: int, endpoint: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint

    @property
    def is_auth_expired(self) -> bool:
        """Return True when the session credential is no longer valid."""
        return self.status_code == HTTP_UNAUTHORIZED


class AuthExpiredError(ApiError):
    """Catalog API rejected the session credential."""

    kind = "auth_expired"


class TransportError(ApiError):
    """Catalog API could not be reached at all."""

    kind = "transport_error"

    def __init__(self, message: str, endpoint: str) -> None:
        super().__init__(message, status_code=0, endpoint=endpoint)
