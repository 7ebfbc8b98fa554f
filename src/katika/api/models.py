"""Pydantic request models for the Katika API.

FastAPI validates every request body against one of these models.  Fields
accept both camelCase (``artistId``) and snake_case (``artist_id``) keys.

Models
------
ArtistCreateRequest
    Payload for ``POST /artists``.
PortfolioCreateRequest
    Payload for ``POST /portfolios``.
GenerateWebRequest
    Optional payload for ``POST /portfolios/{id}/generate-web``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import EmailStr, Field

from katika.core.models import Customizations, DisplayName, KatikaModel, Location, MediaItem, Section


class ArtistCreateRequest(KatikaModel):
    """Request body for ``POST /artists``.

    Attributes:
        name: Display name.
        email: Contact address.  Must be unique across artists.
        category: Free-form category key such as ``visual_artist``.
        experience: Experience level.
        bio: Biography shown on the about page.
        location: City and country.
        genres: Ordered genre/skill tags.
        social_links: Platform name to URL.
        media: Ordered media items; the first one is the profile image.
        is_verified: Verification flag used by the artist directory.
        is_active: Inactive artists are hidden from all public listings.
    """

    name: DisplayName
    email: EmailStr
    category: str = Field(default="creative_professional", min_length=1)
    experience: Literal["beginner", "intermediate", "professional", "expert"] | None = None
    bio: str | None = None
    location: Location = Field(default_factory=Location)
    genres: list[str] = Field(default_factory=list)
    social_links: dict[str, str | None] = Field(default_factory=dict)
    media: list[MediaItem] = Field(default_factory=list)
    is_verified: bool = False
    is_active: bool = True


class PortfolioCreateRequest(KatikaModel):
    """Request body for ``POST /portfolios``.

    Attributes:
        artist_id: Identifier of the owning artist.
        template: Template identifier.  Defaults to ``"modern"``.
        title: Portfolio title.
        description: Optional description shown on the cover.
        sections: Ordered content sections.
        customizations: Colours, fonts and layout.  Missing values are
            filled with platform defaults before the portfolio is stored.
        is_public: Whether the portfolio appears in the public directory.
    """

    artist_id: str = Field(..., min_length=1)
    template: str | None = None
    title: str = Field(..., min_length=1, max_length=300)
    description: str | None = None
    sections: list[Section] = Field(default_factory=list)
    customizations: Customizations | None = None
    is_public: bool = True


class GenerateWebRequest(KatikaModel):
    """Request body for ``POST /portfolios/{id}/generate-web``.

    Attributes:
        custom_domain: Subdomain for the live microsite.  Defaults to a slug
            of the artist name.
        include_email: Whether the microsite shows the artist's email.
    """

    custom_domain: str | None = Field(
        default=None,
        pattern=r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$",
    )
    include_email: bool = False
