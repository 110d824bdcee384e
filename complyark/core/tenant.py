# complyark/core/tenant.py
"""
Organisation tokens embedded in public request-page links.

The token is the base64 form of the query string ``org=<id>``. It is
reversible by anyone, so holding a link is enough to submit cases for that
organisation; it is not an access control.
"""
import base64
import binascii
from urllib.parse import parse_qs

from complyark.core.config import settings
from complyark.exceptions.cases import UnknownOrganisationError

# Largest id a signed 64-bit integer column can hold
MAX_ORGANISATION_ID = 2 ** 63 - 1


def encode_organisation_token(organisation_id: int) -> str:
    return base64.urlsafe_b64encode(f"org={organisation_id}".encode()).decode()


def decode_organisation_token(token: str) -> int:
    """
    Recover the organisation id from a request-page token.

    Accepts standard and URL-safe alphabets, with or without padding.

    Raises:
        UnknownOrganisationError: token is not a valid encoding of org=<id>
    """
    padded = token.strip() + "=" * (-len(token.strip()) % 4)
    try:
        decoded = base64.b64decode(padded.replace("-", "+").replace("_", "/"), validate=True).decode()
    except (binascii.Error, UnicodeDecodeError):
        raise UnknownOrganisationError("Invalid organisation link")

    values = parse_qs(decoded).get("org")
    if not values or not (values[0].isascii() and values[0].isdecimal()):
        raise UnknownOrganisationError("Invalid organisation link")

    organisation_id = int(values[0])
    if organisation_id > MAX_ORGANISATION_ID:
        raise UnknownOrganisationError("Invalid organisation link")
    return organisation_id


def build_request_link(organisation_id: int, base_url: str = settings.PUBLIC_REQUEST_BASE_URL) -> str:
    return f"{base_url.rstrip('/')}/{encode_organisation_token(organisation_id)}"
