"""Business directory used by the public booking entry point."""

import logging
import re
from typing import Optional

from barberbook.backend.database import InMemoryDatabase
from barberbook.schemas.business_schema import SLUG_PATTERN, Business

logger = logging.getLogger(__name__)


class BusinessDirectory:
    """Read-only lookups over registered businesses."""

    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    async def get(self, business_id: str) -> Optional[Business]:
        await self._db.roundtrip()
        return self._db.businesses.get(business_id)

    async def get_by_slug(self, slug: str) -> Optional[Business]:
        """Resolve a public slug. Unknown or malformed slugs yield None."""
        await self._db.roundtrip()
        if not slug or not re.match(SLUG_PATTERN, slug):
            logger.debug("Rejected malformed slug: %r", slug)
            return None
        for business in self._db.businesses.values():
            if business.shop_slug == slug:
                return business
        logger.debug("No business for slug '%s'", slug)
        return None
