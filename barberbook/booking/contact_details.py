"""Client contact details collected on the last booking step."""

import re

from pydantic import BaseModel, ValidationError, field_validator

from barberbook.errors import ValidationFailed
from barberbook.utils import normalize_phone

# Brazilian landline or mobile with area code: (11) 99999-9999, 11 3333-4444, 11999999999
PHONE_PATTERN = re.compile(r"^\(?[1-9]{2}\)? ?(?:[2-8]|9[1-9])[0-9]{3}-?[0-9]{4}$")
MIN_NAME_LENGTH = 1


class ContactDetails(BaseModel):
    """Validated name and phone; the phone is stored as digits only."""
    client_name: str
    client_phone: str

    @field_validator("client_name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        value = " ".join(value.split())
        if len(value) < MIN_NAME_LENGTH:
            raise ValueError("name is required")
        return value

    @field_validator("client_phone")
    @classmethod
    def _phone_format(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("phone is required")
        if not PHONE_PATTERN.match(value):
            raise ValueError("invalid phone number")
        return normalize_phone(value)


def validate_contact_details(client_name: str, client_phone: str) -> ContactDetails:
    """
    Check the contact form locally, before anything is sent to the backend.

    Raises:
        ValidationFailed: With ``field`` naming the first offending input.
    """
    try:
        return ContactDetails(client_name=client_name, client_phone=client_phone)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else None
        message = error.get("ctx", {}).get("error") or error["msg"]
        raise ValidationFailed(str(message), field=field) from exc
