"""Resolution of portfolio customisations to concrete values.

Portfolios may leave any colour, font or layout field unset.  Renderers never
read those fields directly; they call :func:`resolve_customizations`, which
walks an explicit, ordered fallback list per field and always returns a
concrete value.

Colour strings are decoded for the PDF renderer with :func:`hex_to_rgb`.  The
decoder accepts exactly six hex digits with an optional leading ``#`` (case
insensitive).  Short forms such as ``#fff``, alpha forms such as
``#B026FFCC`` and anything else fall back to :data:`DEFAULT_RGB`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from katika.core.models import Colors, Customizations, Fonts

DEFAULT_COLORS = {
    "primary": "#B026FF",
    "secondary": "#ffffff",
    "accent": "#FFD23F",
}
DEFAULT_FONTS = {
    "heading": "Montserrat",
    "body": "Poppins",
}
DEFAULT_LAYOUT = "grid"

# Decoded form of DEFAULT_COLORS["primary"].
DEFAULT_RGB: tuple[int, int, int] = (176, 38, 255)

_HEX_PATTERN = re.compile(r"#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})", re.IGNORECASE)


@dataclass(frozen=True)
class ResolvedCustomizations:
    """Customisations with every field resolved."""

    primary: str
    secondary: str
    accent: str
    heading_font: str
    body_font: str
    layout: str


def _first_present(*candidates: str | None) -> str:
    """Return the first candidate that is a non-empty string."""
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate
    raise ValueError("fallback chain has no concrete value")


def resolve_customizations(customizations: Customizations | None) -> ResolvedCustomizations:
    """Resolve every customisation field through its fallback chain.

    The chain for each field is: the portfolio's explicit value, then the
    platform default.  Empty strings are treated as unset.

    Args:
        customizations: Portfolio customisations, or ``None``.

    Returns:
        A :class:`ResolvedCustomizations` with no missing fields.
    """
    custom = customizations or Customizations()
    colors = custom.colors
    fonts = custom.fonts

    return ResolvedCustomizations(
        primary=_first_present(colors.primary, DEFAULT_COLORS["primary"]),
        secondary=_first_present(colors.secondary, DEFAULT_COLORS["secondary"]),
        accent=_first_present(colors.accent, DEFAULT_COLORS["accent"]),
        heading_font=_first_present(fonts.heading, DEFAULT_FONTS["heading"]),
        body_font=_first_present(fonts.body, DEFAULT_FONTS["body"]),
        layout=_first_present(custom.layout, DEFAULT_LAYOUT),
    )


def apply_defaults(customizations: Customizations | None) -> Customizations:
    """Return customisations with every field filled in, ready to store."""
    resolved = resolve_customizations(customizations)
    return Customizations(
        colors=Colors(primary=resolved.primary, secondary=resolved.secondary, accent=resolved.accent),
        fonts=Fonts(heading=resolved.heading_font, body=resolved.body_font),
        layout=resolved.layout,
    )


def hex_to_rgb(value: str | None) -> tuple[int, int, int]:
    """Decode ``#RRGGBB`` (or ``RRGGBB``) to an integer triple.

    Args:
        value: Colour string.

    Returns:
        ``(r, g, b)`` with each channel in 0-255, or :data:`DEFAULT_RGB` when
        the value is not exactly six hex digits.
    """
    if not isinstance(value, str):
        return DEFAULT_RGB
    match = _HEX_PATTERN.fullmatch(value)
    if match is None:
        return DEFAULT_RGB
    return tuple(int(group, 16) for group in match.groups())  # type: ignore[return-value]
