"""Core domain layer: configuration, records, storage and queries.

Modules
-------
config
    Pydantic Settings configuration (``KATIKA_`` environment prefix).
models
    Artist, portfolio and generated-file records.
customization
    Fallback resolution for colours, fonts and layout.
store
    JSON document store with uniqueness and reference rules.
directory
    Public directory, artist directory, analytics and platform stats.
errors
    Error taxonomy and JSON error payloads.
logging_setup
    Process-wide logging configuration.
"""

from katika.core.config import KatikaConfig
from katika.core.store import PortfolioStore

__all__ = ["KatikaConfig", "PortfolioStore"]
