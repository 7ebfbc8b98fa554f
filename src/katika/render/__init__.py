"""Document renderers.

Both renderers take a :class:`~katika.core.models.PortfolioAggregate` and
produce a standalone document: :mod:`katika.render.pdf` writes a paginated
PDF to a binary stream, :mod:`katika.render.html` returns a microsite as a
string.
"""

from katika.render.html import render_portfolio_html
from katika.render.pdf import PdfPage, render_portfolio_pdf

__all__ = ["PdfPage", "render_portfolio_html", "render_portfolio_pdf"]
