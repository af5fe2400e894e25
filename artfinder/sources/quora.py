"""Quora placeholder adapter.

Quora offers no public search API, so this adapter always yields nothing.
It stays registered so that selecting Quora is a valid request.
"""

import logging
from typing import List

from artfinder.models import ResearchItem, Source

logger = logging.getLogger(__name__)


class QuoraAdapter:
    """Always returns an empty list; makes no network calls."""

    source = Source.QUORA

    async def fetch(self, topic: str) -> List[ResearchItem]:
        logger.debug("Quora has no public API; returning no items for %r", topic)
        return []
