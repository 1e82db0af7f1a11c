# Modelos ORM del sistema de cotizaciones

from .quote import (
    Quote,
    QuoteAttachment,
    QuoteFeature,
    QuoteNote,
    QuoteStatusHistory,
)

__all__ = [
    "Quote",
    "QuoteAttachment",
    "QuoteFeature",
    "QuoteNote",
    "QuoteStatusHistory",
]
