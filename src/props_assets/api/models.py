"""Request models for the HTTP surface."""

from pydantic import BaseModel, Field


class NameRequest(BaseModel):
    """Name of a project or folder to create."""

    name: str = Field(max_length=200)


class CredentialsRequest(BaseModel):
    """Email and password for sign-in or sign-up."""

    email: str
    password: str
