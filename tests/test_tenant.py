"""
Request-page link token tests
"""
import base64

import pytest

from complyark.core.tenant import build_request_link, decode_organisation_token, encode_organisation_token
from complyark.exceptions.cases import UnknownOrganisationError


class TestOrganisationToken:

    def test_token_encodes_org_query(self):
        token = encode_organisation_token(42)
        assert base64.urlsafe_b64decode(token).decode() == "org=42"
        assert decode_organisation_token(token) == 42

    def test_accepts_unpadded_and_standard_alphabet(self):
        standard = base64.b64encode(b"org=1234").decode()
        assert decode_organisation_token(standard) == 1234
        assert decode_organisation_token(standard.rstrip("=")) == 1234

    @pytest.mark.parametrize("token", [
        "not base64!",
        base64.b64encode(b"org=abc").decode(),
        base64.b64encode(b"tenant=1").decode(),
        base64.b64encode("org=\u00b2".encode()).decode(),
        base64.b64encode(b"org=99999999999999999999999").decode(),
        "",
    ])
    def test_invalid_tokens(self, token):
        with pytest.raises(UnknownOrganisationError):
            decode_organisation_token(token)

    def test_request_link(self):
        link = build_request_link(7, base_url="https://complyark.example/request/")
        assert link == f"https://complyark.example/request/{encode_organisation_token(7)}"

    def test_largest_64_bit_id_is_accepted(self):
        token = encode_organisation_token(2 ** 63 - 1)
        assert decode_organisation_token(token) == 2 ** 63 - 1
