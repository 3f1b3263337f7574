"""Pydantic v2 models for app registration requests and records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

SLUG_REGEX = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class AppRequest(BaseModel):
    """An incoming, unvalidated registration request."""

    raw_title: str = Field(default="", description="Title exactly as typed by the user")
    raw_description: str = Field(default="", description="Free-text prompt describing the app")


class AppRecord(BaseModel):
    """A registered app.  Immutable once built.

    The registry keys records by ``slug``; the other three fields are what
    gets persisted under that key.
    """

    model_config = ConfigDict(frozen=True)

    slug: str = Field(..., pattern=SLUG_REGEX, description="Unique, directory-safe identifier")
    title: str = Field(..., description="Trimmed display title")
    description: str = Field(default="", description="Bounded display description")
    sequence: int = Field(..., ge=1, description="Creation order, strictly increasing")

    def to_entry(self) -> dict[str, str | int]:
        """Return the persisted value stored under this record's slug."""
        return {
            "title": self.title,
            "description": self.description,
            "sequence": self.sequence,
        }

    @classmethod
    def from_entry(cls, slug: str, entry: dict[str, object]) -> "AppRecord":
        """Rebuild a record from its slug key and persisted value."""
        return cls.model_validate({**entry, "slug": slug})
