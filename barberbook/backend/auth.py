"""
Owner authentication and session state.

Accounts live in the same in-memory database as the rest of the data.
Passwords are stored as bcrypt hashes through passlib. The provider
remembers one signed-in owner at a time, the way a browser session would.
"""

import logging
import uuid
from typing import Optional

from passlib.context import CryptContext
from pydantic import ValidationError

from barberbook.backend.database import Credential, InMemoryDatabase
from barberbook.config import settings
from barberbook.errors import NotAuthenticated, ValidationFailed
from barberbook.schemas.business_schema import Business, SignUpForm
from barberbook.utils import slugify

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.auth.bcrypt_rounds
)


def _sign_up_form(email: str, shop_name: str, shop_slug: str) -> SignUpForm:
    try:
        return SignUpForm(email=email, shop_name=shop_name, shop_slug=shop_slug)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else None
        raise ValidationFailed(f"Invalid account: {error['msg']}", field=field) from exc


class AuthProvider:
    """Sign-up, sign-in and current-owner resolution."""

    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db
        self._current_id: Optional[str] = None

    async def sign_up(
        self, email: str, password: str, shop_name: str, shop_slug: Optional[str] = None
    ) -> Business:
        """Register a business account and sign it in.

        Without an explicit slug, one is suggested from the shop name.
        """
        shop_slug = shop_slug if shop_slug is not None else slugify(shop_name)
        form = _sign_up_form(email.strip().lower(), shop_name.strip(), shop_slug)
        if len(password) < settings.auth.min_password_length:
            raise ValidationFailed(
                f"Password must have at least {settings.auth.min_password_length} characters.",
                field="password",
            )

        async with self._db.transaction() as db:
            if form.email in db.credentials:
                raise ValidationFailed("Email already registered.", field="email")
            if any(b.shop_slug == form.shop_slug for b in db.businesses.values()):
                raise ValidationFailed("Slug already taken.", field="shop_slug")
            business = Business(id=str(uuid.uuid4()), **form.model_dump())
            db.write("businesses", business.id, business)
            db.write("credentials", form.email, Credential(
                business_id=business.id, password_hash=pwd_context.hash(password),
            ))

        self._current_id = business.id
        logger.info("Business registered: %s (%s)", business.shop_name, business.shop_slug)
        return business

    async def sign_in(self, email: str, password: str) -> Business:
        await self._db.roundtrip()
        credential = self._db.credentials.get(email.strip().lower())
        if credential is None or not pwd_context.verify(password, credential.password_hash):
            logger.debug("Sign-in rejected for %s", email)
            raise NotAuthenticated("Invalid email or password.")
        self._current_id = credential.business_id
        logger.info("Owner signed in: %s", credential.business_id)
        return self._db.businesses[credential.business_id]

    async def sign_out(self) -> None:
        await self._db.roundtrip()
        self._current_id = None

    def current_owner(self) -> Optional[Business]:
        """The signed-in business, or None."""
        if self._current_id is None:
            return None
        return self._db.businesses.get(self._current_id)

    def require_owner(self) -> Business:
        """Return the signed-in business.

        Raises:
            NotAuthenticated: Nobody is signed in.
        """
        owner = self.current_owner()
        if owner is None:
            raise NotAuthenticated("User not authenticated.")
        return owner
