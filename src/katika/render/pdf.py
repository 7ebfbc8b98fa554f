"""Paginated PDF rendering of a portfolio.

:func:`render_portfolio_pdf` draws an A4 document with ReportLab in one forward
pass and writes it to a caller-supplied binary sink.  Page order is fixed:

1. Cover - colour banner, artist identity, title, optional description
2. About - only when the artist has a bio
3. One page per section - header band, justified content, media placeholders
4. Skills - only when the artist has genres; pill labels packed in rows
5. Contact - email, optional location, optional social links

and a footer is stamped on the last page.

Layout bookkeeping uses *top-down* coordinates (``top`` grows towards the
bottom of the page, like the page description in the rest of this module);
:class:`_PageWriter` converts to ReportLab's bottom-left origin when drawing.

The function returns one :class:`PdfPage` per emitted page, recording what kind
of page it is and the boxes drawn on it, so callers and tests can inspect the
layout without parsing the PDF.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import BinaryIO
from xml.sax.saxutils import escape

from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_JUSTIFY, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph

from katika.core.customization import hex_to_rgb, resolve_customizations
from katika.core.errors import NotFoundError
from katika.core.models import PortfolioAggregate, utcnow

logger = logging.getLogger(__name__)

MARGIN = 50
BANNER_HEIGHT = 200
RULE_TOP = 180
RULE_HEIGHT = 3
TITLE_TOP = 220

HEADER_TOP = 50
HEADER_HEIGHT = 40
HEADER_TEXT_X = 60
HEADER_TEXT_TOP = 65
BODY_TOP = 110

MEDIA_BOX_WIDTH = 150
MEDIA_BOX_HEIGHT = 100
MEDIA_PITCH = 120
MEDIA_GAP_AFTER_TEXT = 20

TAG_TOP = 120
TAG_HEIGHT = 25
TAG_ROW_PITCH = 35
TAG_GAP = 10
TAG_PADDING = 20
TAG_FONT_SIZE = 10

CONTACT_TOP = 120
LINK_HEADER_PITCH = 25
LINK_PITCH = 20
FOOTER_OFFSET = 30

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
WHITE = (255, 255, 255)
TEXT_COLOR = "#333333"
LINK_COLOR = "#0066cc"
FOOTER_COLOR = "#666666"

# Fraction of the font size between the top of a line and its baseline.
_ASCENT = 0.8


@dataclass(frozen=True)
class Box:
    """A rectangle drawn on a page, in top-down points."""

    label: str
    x: float
    top: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass
class PdfPage:
    """Summary of one emitted page."""

    number: int
    kind: str
    heading: str | None = None
    boxes: list[Box] = field(default_factory=list)


def _markup(text: str) -> str:
    """Escape free text for a ReportLab paragraph, keeping line breaks."""
    return escape(text).replace("\r\n", "\n").replace("\n", "<br/>")


def _fraction(rgb: tuple[int, int, int]) -> tuple[float, float, float]:
    return tuple(channel / 255 for channel in rgb)  # type: ignore[return-value]


def _hex(rgb: tuple[int, int, int]) -> str:
    return "#{:02x}{:02x}{:02x}".format(*rgb)


class _PageWriter:
    """Canvas wrapper that tracks pages and converts coordinates."""

    def __init__(self, sink: BinaryIO, *, title: str, author: str, creator: str):
        self.canvas = canvas.Canvas(sink, pagesize=A4)
        self.canvas.setTitle(title)
        self.canvas.setAuthor(author)
        self.canvas.setSubject("Professional Portfolio")
        self.canvas.setCreator(creator)
        self.width, self.height = A4
        self.pages: list[PdfPage] = []

    @property
    def printable_width(self) -> float:
        return self.width - 2 * MARGIN

    @property
    def printable_bottom(self) -> float:
        return self.height - MARGIN

    @property
    def page(self) -> PdfPage:
        return self.pages[-1]

    def start_page(self, kind: str, heading: str | None = None) -> PdfPage:
        if self.pages:
            self.canvas.showPage()
        page = PdfPage(number=len(self.pages) + 1, kind=kind, heading=heading)
        self.pages.append(page)
        return page

    def continue_page(self) -> float:
        """Break to a new page of the same kind and return the top to resume at."""
        current = self.page
        self.start_page(current.kind, current.heading)
        return MARGIN

    # Drawing primitives -------------------------------------------------

    def fill_rect(self, x, top, width, height, rgb, *, radius: float = 0) -> None:
        self.canvas.setFillColorRGB(*_fraction(rgb))
        y = self.height - top - height
        if radius:
            self.canvas.roundRect(x, y, width, height, radius, stroke=0, fill=1)
        else:
            self.canvas.rect(x, y, width, height, stroke=0, fill=1)

    def stroke_rect(self, x, top, width, height, rgb) -> None:
        self.canvas.setStrokeColorRGB(*_fraction(rgb))
        self.canvas.rect(x, self.height - top - height, width, height, stroke=1, fill=0)

    def _set_text_color(self, color) -> None:
        if isinstance(color, str):
            self.canvas.setFillColor(HexColor(color))
        else:
            self.canvas.setFillColorRGB(*_fraction(color))

    def text(self, value, x, top, *, size, color, font=FONT, center_width=None) -> float:
        """Draw a single line of text and return its baseline (bottom-left y)."""
        self.canvas.setFont(font, size)
        self._set_text_color(color)
        baseline = self.height - top - size * _ASCENT
        if center_width is not None:
            self.canvas.drawCentredString(x + center_width / 2, baseline, value)
        else:
            self.canvas.drawString(x, baseline, value)
        return baseline

    def link(self, value, url, x, top, *, size, color) -> None:
        """Draw an underlined line of text that links to ``url``."""
        baseline = self.text(value, x, top, size=size, color=color)
        text_width = stringWidth(value, FONT, size)
        self.canvas.setStrokeColor(HexColor(color))
        self.canvas.setLineWidth(0.5)
        self.canvas.line(x, baseline - 1.5, x + text_width, baseline - 1.5)
        self.canvas.linkURL(url, (x, baseline - 2, x + text_width, baseline + size), relative=0)

    def paragraph(self, value, top, *, size=12, color=TEXT_COLOR, align=TA_JUSTIFY) -> float:
        """Draw wrapped text across the printable width, breaking pages as needed.

        Returns:
            The top-down position just below the last line drawn.
        """
        style = ParagraphStyle(
            "body",
            fontName=FONT,
            fontSize=size,
            leading=size * 1.25,
            alignment=align,
            textColor=HexColor(color if isinstance(color, str) else _hex(color)),
        )
        flowable = Paragraph(_markup(value), style)

        while True:
            available = self.printable_bottom - top
            _, height = flowable.wrap(self.printable_width, available)
            if height <= available:
                flowable.drawOn(self.canvas, MARGIN, self.height - top - height)
                return top + height

            parts = flowable.split(self.printable_width, available)
            if len(parts) != 2:
                if top == MARGIN:
                    # Not even one line fits on an empty page; draw it anyway.
                    flowable.drawOn(self.canvas, MARGIN, self.height - top - height)
                    return top + height
                top = self.continue_page()
                continue

            head, flowable = parts
            _, head_height = head.wrap(self.printable_width, available)
            head.drawOn(self.canvas, MARGIN, self.height - top - head_height)
            top = self.continue_page()

    def header_band(self, heading: str, accent) -> None:
        self.fill_rect(MARGIN, HEADER_TOP, self.printable_width, HEADER_HEIGHT, accent)
        self.text(heading, HEADER_TEXT_X, HEADER_TEXT_TOP, size=18, color=WHITE, font=FONT_BOLD)

    def save(self) -> None:
        self.canvas.save()


def _category_label(category: str | None) -> str:
    if not category:
        return "CREATIVE PROFESSIONAL"
    return category.replace("_", " ", 1).upper()


def render_portfolio_pdf(
    aggregate: PortfolioAggregate,
    sink: BinaryIO,
    *,
    brand_name: str = "KatikaNaMe Platform",
    brand_site: str = "www.katikaname.com",
    now: datetime | None = None,
) -> list[PdfPage]:
    """Render a portfolio to PDF.

    Args:
        aggregate: Portfolio with its artist populated.
        sink: Binary stream the PDF bytes are written to.  The stream is not
            closed.
        brand_name: Platform name for the document metadata and footer.
        brand_site: Site address printed in the footer.
        now: Timestamp printed in the footer; defaults to the current time.

    Returns:
        One :class:`PdfPage` per page written, in order.

    Raises:
        NotFoundError: The aggregate has no artist.  Nothing is written.
    """
    artist = aggregate.artist
    if artist is None:
        raise NotFoundError("Artist not found")

    portfolio = aggregate.portfolio
    now = now or utcnow()
    resolved = resolve_customizations(portfolio.customizations)
    primary = hex_to_rgb(resolved.primary)
    accent = hex_to_rgb(resolved.accent)

    writer = _PageWriter(sink, title=portfolio.title, author=artist.name, creator=brand_name)
    center_width = writer.printable_width

    # --- Cover -------------------------------------------------------------
    writer.start_page("cover")
    writer.fill_rect(0, 0, writer.width, BANNER_HEIGHT, primary)
    writer.text(artist.name, MARGIN, 80, size=32, color=WHITE, font=FONT_BOLD, center_width=center_width)
    writer.text(_category_label(artist.category), MARGIN, 120, size=18, color=WHITE, center_width=center_width)
    if artist.experience:
        writer.text(f"{artist.experience.upper()} LEVEL", MARGIN, 145, size=14, color=WHITE, center_width=center_width)
    writer.fill_rect(MARGIN, RULE_TOP, writer.printable_width, RULE_HEIGHT, accent)

    top = writer.paragraph(portfolio.title, TITLE_TOP, size=24, color=primary, align=TA_LEFT)
    if portfolio.description:
        writer.paragraph(portfolio.description, top + 24)

    # --- About -------------------------------------------------------------
    if artist.bio:
        writer.start_page("about", "ABOUT THE ARTIST")
        writer.header_band("ABOUT THE ARTIST", accent)
        writer.paragraph(artist.bio, BODY_TOP)

    # --- Sections ----------------------------------------------------------
    for section in portfolio.sections:
        heading = section.display_title().upper()
        writer.start_page("section", heading)
        writer.header_band(heading, accent)

        top = BODY_TOP
        if section.content:
            top = writer.paragraph(section.content, top) + MEDIA_GAP_AFTER_TEXT

        for _media_url in section.media:
            if top + MEDIA_BOX_HEIGHT > writer.printable_bottom:
                top = writer.continue_page()
            writer.stroke_rect(MARGIN, top, MEDIA_BOX_WIDTH, MEDIA_BOX_HEIGHT, primary)
            writer.text(
                "Media Content",
                MARGIN,
                top + 45,
                size=10,
                color=primary,
                center_width=MEDIA_BOX_WIDTH,
            )
            writer.page.boxes.append(Box("media", MARGIN, top, MEDIA_BOX_WIDTH, MEDIA_BOX_HEIGHT))
            top += MEDIA_PITCH

    # --- Skills ------------------------------------------------------------
    if artist.genres:
        writer.start_page("skills", "SKILLS & SPECIALTIES")
        writer.header_band("SKILLS & SPECIALTIES", accent)

        x, top = MARGIN, TAG_TOP
        for genre in artist.genres:
            tag_width = stringWidth(genre, FONT, TAG_FONT_SIZE) + TAG_PADDING
            if x + tag_width > writer.width - MARGIN:
                x = MARGIN
                top += TAG_ROW_PITCH
            if top + TAG_HEIGHT > writer.printable_bottom:
                top = writer.continue_page()
                x = MARGIN

            writer.fill_rect(x, top, tag_width, TAG_HEIGHT, primary, radius=TAG_HEIGHT / 2)
            writer.text(genre, x + 10, top + 8, size=TAG_FONT_SIZE, color=WHITE)
            writer.page.boxes.append(Box("tag", x, top, tag_width, TAG_HEIGHT))
            x += tag_width + TAG_GAP

    # --- Contact -----------------------------------------------------------
    writer.start_page("contact", "CONTACT INFORMATION")
    writer.header_band("CONTACT INFORMATION", accent)

    top = CONTACT_TOP
    writer.text("Email:", MARGIN, top, size=14, color=primary, font=FONT_BOLD)
    writer.text(str(artist.email), MARGIN, top + 20, size=12, color=TEXT_COLOR)
    top += 50

    location = artist.location.display()
    if location:
        writer.text("Location:", MARGIN, top, size=14, color=primary, font=FONT_BOLD)
        writer.text(location, MARGIN, top + 20, size=12, color=TEXT_COLOR)
        top += 50

    links = artist.populated_social_links()
    if links:
        if top + LINK_HEADER_PITCH + LINK_PITCH > writer.printable_bottom:
            top = writer.continue_page()
        writer.text("Connect Online:", MARGIN, top, size=14, color=primary, font=FONT_BOLD)
        top += LINK_HEADER_PITCH
        for platform, url in links:
            if top + LINK_PITCH > writer.printable_bottom:
                top = writer.continue_page()
            label = f"{platform[:1].upper()}{platform[1:]}: {url}"
            writer.link(label, url, MARGIN, top, size=12, color=LINK_COLOR)
            writer.page.boxes.append(Box("link", MARGIN, top, stringWidth(label, FONT, 12), LINK_PITCH))
            top += LINK_PITCH

    # --- Footer ------------------------------------------------------------
    footer = f"Generated by {brand_name} • {now.strftime('%d %B %Y')} • {brand_site}"
    writer.text(
        footer,
        MARGIN,
        writer.height - FOOTER_OFFSET,
        size=8,
        color=FOOTER_COLOR,
        center_width=center_width,
    )

    writer.save()
    logger.info(f"Rendered PDF for portfolio {portfolio.id}: {len(writer.pages)} page(s)")
    return writer.pages
