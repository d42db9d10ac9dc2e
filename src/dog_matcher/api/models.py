"""Pydantic request bodies for the session API."""

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """Login form payload."""

    name: str = ""
    email: str = ""


class BreedRequest(BaseModel):
    """Breed filter payload."""

    breed: str


class SortRequest(BaseModel):
    """Sort order payload, e.g. ``age:asc``."""

    sort: str


class ZipRequest(BaseModel):
    """ZIP code filter payload."""

    zip_code: str
