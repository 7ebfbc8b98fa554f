"""Record models for artists, portfolios and generated files.

Records are stored with snake_case keys and served to API clients with
camelCase keys.  Both spellings are accepted on input, so a client may send
either ``socialLinks`` or ``social_links``.

Models
------
Artist
    A creative professional.  Owns at most one portfolio through
    ``portfolio_id``.
Portfolio
    Owned by exactly one artist.  Holds ordered sections, customisations and
    the append-only list of generated files.
PortfolioAggregate
    A portfolio with its artist populated.  This is the input both document
    renderers work from.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints
from pydantic.alias_generators import to_camel


# Surrounding whitespace is stripped before the length check, so blank names are rejected.
DisplayName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]


def new_id() -> str:
    """Return a fresh record identifier."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KatikaModel(BaseModel):
    """Base model with camelCase aliases for the API surface."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_api(self, **kwargs) -> dict:
        """Serialise for a JSON response (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)

    def to_record(self) -> dict:
        """Serialise for the document store (snake_case keys)."""
        return self.model_dump(mode="json")


class Location(KatikaModel):
    city: str | None = None
    country: str | None = None

    def display(self) -> str:
        """Return ``"city, country"`` using only the populated parts."""
        return ", ".join(part for part in (self.city, self.country) if part)


class MediaItem(KatikaModel):
    url: str
    kind: str = "image"
    caption: str | None = None


class Rating(KatikaModel):
    average: float = Field(default=0.0, ge=0, le=5)
    count: int = Field(default=0, ge=0)


class Artist(KatikaModel):
    id: str = Field(default_factory=new_id)
    name: DisplayName
    email: EmailStr
    category: str = "creative_professional"
    experience: Literal["beginner", "intermediate", "professional", "expert"] | None = None
    bio: str | None = None
    location: Location = Field(default_factory=Location)
    genres: list[str] = Field(default_factory=list)
    social_links: dict[str, str | None] = Field(default_factory=dict)
    media: list[MediaItem] = Field(default_factory=list)
    is_verified: bool = False
    is_active: bool = True
    rating: Rating = Field(default_factory=Rating)
    views: int = 0
    portfolio_id: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def public_view(self) -> dict:
        """API representation with the email address removed."""
        return self.to_api(exclude={"email"})

    def populated_social_links(self) -> list[tuple[str, str]]:
        """Social platforms that carry a URL, in insertion order."""
        return [(platform, url) for platform, url in self.social_links.items() if url]


class Colors(KatikaModel):
    primary: str | None = None
    secondary: str | None = None
    accent: str | None = None


class Fonts(KatikaModel):
    heading: str | None = None
    body: str | None = None


class Customizations(KatikaModel):
    colors: Colors = Field(default_factory=Colors)
    fonts: Fonts = Field(default_factory=Fonts)
    layout: str | None = None


class Section(KatikaModel):
    type: str = Field(..., min_length=1)
    title: str | None = None
    content: str = ""
    media: list[str] = Field(default_factory=list)

    def display_title(self) -> str:
        """Title, or the type with its first character upper-cased."""
        if self.title:
            return self.title
        return self.type[:1].upper() + self.type[1:]


class GeneratedFile(KatikaModel):
    format: Literal["pdf", "html"]
    filename: str
    url: str
    generated_at: datetime = Field(default_factory=utcnow)


class Portfolio(KatikaModel):
    id: str = Field(default_factory=new_id)
    artist_id: str
    template: str = "modern"
    title: str = Field(..., min_length=1, max_length=300)
    description: str | None = None
    customizations: Customizations = Field(default_factory=Customizations)
    sections: list[Section] = Field(default_factory=list)
    views: int = 0
    is_public: bool = True
    generated_files: list[GeneratedFile] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def has_section(self, section_type: str) -> bool:
        return any(section.type == section_type for section in self.sections)


class PortfolioAggregate(KatikaModel):
    """A portfolio together with its populated artist."""

    portfolio: Portfolio
    artist: Artist | None = None

    def to_api(self, *, include_email: bool = False, **kwargs) -> dict:
        body = self.portfolio.to_api(**kwargs)
        if self.artist is not None:
            body["artist"] = self.artist.to_api() if include_email else self.artist.public_view()
        return body
