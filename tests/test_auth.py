"""Tests for owner sign-up, sign-in and session resolution."""

import pytest

from barberbook.backend.auth import AuthProvider, pwd_context
from barberbook.backend.demo import DEMO_EMAIL, DEMO_PASSWORD, DEMO_SLUG
from barberbook.errors import NotAuthenticated, PersistenceFailed, ValidationFailed
from barberbook.schemas.business_schema import SubscriptionStatus


class TestSignUp:
    @pytest.mark.asyncio
    async def test_sign_up_creates_trial_business_and_signs_in(self, db):
        auth = AuthProvider(db)
        business = await auth.sign_up("Dono@Barbearia.com ", "secret1", " Barbearia ", "barbearia")
        assert business.email == "dono@barbearia.com"
        assert business.shop_name == "Barbearia"
        assert business.subscription_status == SubscriptionStatus.TRIAL
        assert auth.current_owner() == business

    @pytest.mark.asyncio
    async def test_slug_suggested_from_shop_name(self, db):
        business = await AuthProvider(db).sign_up("dono@barbearia.com", "secret1", "Barbearia do João")
        assert business.shop_slug == "barbearia-do-joao"

    @pytest.mark.asyncio
    async def test_password_is_not_stored_in_clear(self, db):
        await AuthProvider(db).sign_up("dono@barbearia.com", "secret1", "Barbearia", "barbearia")
        credential = db.credentials["dono@barbearia.com"]
        assert credential.password_hash != "secret1"
        assert credential.password_hash.startswith("$2b$")
        assert pwd_context.verify("secret1", credential.password_hash)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["dono@", "dono barbearia@shop.com", "@barbearia.com"])
    async def test_malformed_email_rejected(self, db, email):
        with pytest.raises(ValidationFailed, match="Invalid account") as exc_info:
            await AuthProvider(db).sign_up(email, "secret1", "Barbearia", "barbearia")
        assert exc_info.value.field == "email"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password,slug,field", [
        ("not-an-email", "secret1", "barbearia", "email"),
        ("dono@barbearia.com", "12345", "barbearia", "password"),
        ("dono@barbearia.com", "secret1", "Barbearia do João", "shop_slug"),
        ("dono@barbearia.com", "secret1", "barbearia_joao", "shop_slug"),
    ])
    async def test_invalid_input_rejected(self, db, email, password, slug, field):
        with pytest.raises(ValidationFailed) as exc_info:
            await AuthProvider(db).sign_up(email, password, "Barbearia", slug)
        assert exc_info.value.field == field
        assert db.businesses == {}

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, db, shop):
        with pytest.raises(ValidationFailed, match="Email already registered"):
            await AuthProvider(db).sign_up(DEMO_EMAIL.upper(), "secret1", "Copy", "copy")

    @pytest.mark.asyncio
    async def test_duplicate_slug_rejected(self, db, shop):
        with pytest.raises(ValidationFailed, match="Slug already taken"):
            await AuthProvider(db).sign_up("new@shop.com", "secret1", "Copy", DEMO_SLUG)
        assert len(db.businesses) == 1

    @pytest.mark.asyncio
    async def test_blank_shop_name_rejected(self, db):
        with pytest.raises(ValidationFailed, match="Invalid account"):
            await AuthProvider(db).sign_up("dono@barbearia.com", "secret1", "   ", "barbearia")
        assert db.credentials == {}

    @pytest.mark.asyncio
    async def test_backend_down(self, db):
        db.available = False
        with pytest.raises(PersistenceFailed):
            await AuthProvider(db).sign_up("dono@barbearia.com", "secret1", "Barbearia", "barbearia")


class TestSignIn:
    @pytest.mark.asyncio
    async def test_sign_in_with_demo_credentials(self, db, shop):
        auth = AuthProvider(db)
        assert auth.current_owner() is None
        business = await auth.sign_in(DEMO_EMAIL, DEMO_PASSWORD)
        assert business.id == shop.id
        assert auth.require_owner().id == shop.id

    @pytest.mark.asyncio
    async def test_email_is_case_insensitive(self, db, shop):
        business = await AuthProvider(db).sign_in(f"  {DEMO_EMAIL.upper()} ", DEMO_PASSWORD)
        assert business.id == shop.id

    @pytest.mark.asyncio
    async def test_wrong_password(self, db, shop):
        auth = AuthProvider(db)
        with pytest.raises(NotAuthenticated):
            await auth.sign_in(DEMO_EMAIL, "wrong-password")
        assert auth.current_owner() is None

    @pytest.mark.asyncio
    async def test_unknown_email(self, db, shop):
        with pytest.raises(NotAuthenticated):
            await AuthProvider(db).sign_in("nobody@nowhere.com", DEMO_PASSWORD)

    @pytest.mark.asyncio
    async def test_sign_out(self, db, shop):
        auth = AuthProvider(db)
        await auth.sign_in(DEMO_EMAIL, DEMO_PASSWORD)
        await auth.sign_out()
        assert auth.current_owner() is None
        with pytest.raises(NotAuthenticated):
            auth.require_owner()
