"""Login form model."""

from pydantic import BaseModel, ConfigDict, Field


class LoginCredentials(BaseModel):
    """Name and email sent to the catalog's login endpoint."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
