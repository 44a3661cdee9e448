"""
Seed data for the console demo and the CLI.

Registers one barbershop with a small catalog and the default week,
then signs the owner out again so the data is reached the way a public
client would reach it.
"""

import logging

from barberbook.backend.auth import AuthProvider
from barberbook.backend.catalog import ServiceCatalog
from barberbook.backend.database import InMemoryDatabase
from barberbook.backend.working_hours import WorkingHoursRepository
from barberbook.scheduling.schedule import WeeklySchedule
from barberbook.schemas.business_schema import Business

logger = logging.getLogger(__name__)

DEMO_SLUG = "navalha-de-ouro"
DEMO_EMAIL = "owner@navalhadeouro.com.br"
DEMO_PASSWORD = "navalha123"

DEMO_SERVICES: list[dict] = [
    {"name": "Haircut", "duration_minutes": 30, "price": 40.0,
     "description": "Scissors or clipper cut, washed and styled."},
    {"name": "Beard Trim", "duration_minutes": 30, "price": 30.0,
     "description": "Shape-up with hot towel."},
    {"name": "Haircut + Beard", "duration_minutes": 60, "price": 65.0},
]


async def seed_demo_business(db: InMemoryDatabase) -> Business:
    """Create the demo shop with services and working hours."""
    auth = AuthProvider(db)
    business = await auth.sign_up(DEMO_EMAIL, DEMO_PASSWORD, "Navalha de Ouro", DEMO_SLUG)

    catalog = ServiceCatalog(db)
    for service in DEMO_SERVICES:
        await catalog.create(business.id, **service)

    await WorkingHoursRepository(db).replace_week(
        business.id, WeeklySchedule.default().days
    )
    await auth.sign_out()
    logger.info("Demo business seeded at /%s", DEMO_SLUG)
    return business
