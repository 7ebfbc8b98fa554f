"""Static HTML microsite rendering of a portfolio.

:func:`render_portfolio_html` is a pure function: given the same aggregate and
the same ``now`` it returns the same document.  ``now`` only feeds the
copyright year and the ``generated-at`` meta tag.

The template is rendered with ``autoescape=False``.  Section content, the
artist bio and the other free-text fields are interpolated into the markup
verbatim, so markup in those fields reaches the browser unchanged.  Content is
trusted to come from the portfolio owner; escaping it here would change the
rendered output of existing portfolios.
"""

from __future__ import annotations

from datetime import datetime

import jinja2

from katika.core.customization import resolve_customizations
from katika.core.errors import NotFoundError
from katika.core.models import PortfolioAggregate, utcnow

TEMPLATE_NAME = "microsite.html.j2"

# Platform names that do not map one-to-one onto an icon class.
ICON_OVERRIDES = {"website": "globe"}

_environment = jinja2.Environment(
    loader=jinja2.PackageLoader("katika", "render/templates"),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)


def social_icon(platform: str) -> str:
    """Return the icon name for a social platform."""
    return ICON_OVERRIDES.get(platform, platform)


def _category_label(category: str | None) -> str:
    if not category:
        return "CREATIVE PROFESSIONAL"
    return category.replace("_", " ", 1).upper()


def build_context(
    aggregate: PortfolioAggregate,
    *,
    include_email: bool = True,
    brand_name: str = "KatikaNaMe Platform",
    now: datetime | None = None,
) -> dict:
    """Flatten an aggregate into the template context."""
    artist = aggregate.artist
    if artist is None:
        raise NotFoundError("Artist not found")

    portfolio = aggregate.portfolio
    now = now or utcnow()
    resolved = resolve_customizations(portfolio.customizations)

    city_line = ""
    if artist.location.city:
        city_line = artist.location.city
        if artist.location.country:
            city_line += f", {artist.location.country}"

    return {
        "page_title": f"{artist.name} - {portfolio.title}",
        "meta_description": portfolio.description or artist.bio or "",
        "keywords": ", ".join(artist.genres),
        "theme": resolved,
        "artist_name": artist.name,
        "initial": artist.name[:1],
        "profile_image": artist.media[0].url if artist.media else None,
        "category_label": _category_label(artist.category),
        "experience_label": f"{artist.experience.upper()} LEVEL" if artist.experience else "",
        "city_line": city_line,
        "has_experience": portfolio.has_section("experience"),
        "has_gallery": portfolio.has_section("gallery"),
        "about_text": artist.bio or portfolio.description or "",
        "genres": list(artist.genres),
        "sections": [
            {"id": section.type, "title": section.display_title(), "content": section.content}
            for section in portfolio.sections
        ],
        "email": str(artist.email) if include_email else "",
        "social_links": [
            {"platform": platform, "url": url, "icon": social_icon(platform)}
            for platform, url in artist.populated_social_links()
        ],
        "brand_name": brand_name,
        "year": now.year,
        "generated_at": now.isoformat(),
    }


def render_portfolio_html(
    aggregate: PortfolioAggregate,
    *,
    include_email: bool = True,
    brand_name: str = "KatikaNaMe Platform",
    now: datetime | None = None,
) -> str:
    """Render a self-contained HTML microsite for a portfolio.

    Args:
        aggregate: Portfolio with its artist populated.
        include_email: When ``False`` the contact block carries an empty
            address instead of the artist's email.
        brand_name: Platform name shown in the footer.
        now: Time used for the copyright year and ``generated-at`` stamp.

    Returns:
        The complete HTML document.

    Raises:
        NotFoundError: The aggregate has no artist.
    """
    context = build_context(aggregate, include_email=include_email, brand_name=brand_name, now=now)
    return _environment.get_template(TEMPLATE_NAME).render(**context)
