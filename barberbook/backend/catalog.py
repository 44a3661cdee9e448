"""Service catalog: named offerings with a fixed duration and price."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from pydantic import ValidationError

from barberbook.backend.database import InMemoryDatabase
from barberbook.errors import NotFound, ValidationFailed
from barberbook.schemas.service_schema import Service, ServiceDraft

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(ServiceDraft.model_fields)


def _draft(**fields: Any) -> ServiceDraft:
    try:
        return ServiceDraft(**fields)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else None
        raise ValidationFailed(f"Invalid service: {error['msg']}", field=field) from exc


class ServiceCatalog:
    """Owner-scoped CRUD over services."""

    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    async def list(self, owner_id: str) -> list[Service]:
        """All services of a business in creation order."""
        await self._db.roundtrip()
        services = [s for s in self._db.services.values() if s.owner_id == owner_id]
        return sorted(services, key=lambda s: s.created_at)

    async def get(self, owner_id: str, service_id: str) -> Service:
        await self._db.roundtrip()
        return self._lookup(owner_id, service_id)

    async def create(
        self,
        owner_id: str,
        name: str,
        duration_minutes: int,
        price: float,
        description: Optional[str] = None,
    ) -> Service:
        draft = _draft(
            name=name, duration_minutes=duration_minutes, price=price, description=description,
        )
        service = Service(id=str(uuid.uuid4()), owner_id=owner_id, **draft.model_dump())
        async with self._db.transaction() as db:
            db.write("services", service.id, service)
        logger.info("Service created: %s (%d min) for %s", service.name, service.duration_minutes, owner_id)
        return service

    async def update(self, owner_id: str, service_id: str, **changes: Any) -> Service:
        """Apply a partial update in place. Existing appointments are untouched."""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationFailed(f"Unknown service fields: {sorted(unknown)}")
        async with self._db.transaction() as db:
            current = self._lookup(owner_id, service_id)
            merged = {f: getattr(current, f) for f in EDITABLE_FIELDS} | changes
            draft = _draft(**merged)
            updated = current.model_copy(update=draft.model_dump())
            db.write("services", updated.id, updated)
        logger.info("Service updated: %s", service_id)
        return updated

    async def delete(self, owner_id: str, service_id: str) -> None:
        """Remove a service from the catalog. Past appointments keep their snapshot."""
        async with self._db.transaction() as db:
            self._lookup(owner_id, service_id)
            db.delete("services", service_id)
        logger.info("Service deleted: %s", service_id)

    def _lookup(self, owner_id: str, service_id: str) -> Service:
        service = self._db.services.get(service_id)
        if service is None or service.owner_id != owner_id:
            raise NotFound(f"Service {service_id} not found.")
        return service
