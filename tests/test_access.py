import jwt
import pytest

from models.user import Role
from services.access import Principal, authenticate, authorize, parse_bearer
from services.errors import Forbidden, Unauthorized
from utils.security import TokenIssuer

SECRET = "test-secret-key-with-enough-length-for-hs256"


@pytest.fixture
def tokens():
    return TokenIssuer(SECRET)


class TestParseBearer:
    def test_valid(self):
        assert parse_bearer("Bearer abc.def.ghi") == "abc.def.ghi"

    @pytest.mark.parametrize(
        "header",
        [None, "", "abc.def.ghi", "Bearer", "Bearer ", "Token abc", "Bearer a b", "bearer abc"],
    )
    def test_malformed(self, header):
        with pytest.raises(Unauthorized):
            parse_bearer(header)


class TestAuthenticate:
    def test_returns_principal(self, tokens):
        token = tokens.issue_access_token("user-1", Role.CUSTOMER)
        principal = authenticate(f"Bearer {token}", tokens)
        assert principal == Principal(user_id="user-1", role=Role.CUSTOMER)

    def test_unknown_role_claim(self, tokens):
        token = tokens.issue_access_token("user-1", "superuser")
        with pytest.raises(Unauthorized):
            authenticate(f"Bearer {token}", tokens)

    def test_tampered_token(self, tokens):
        token = tokens.issue_access_token("user-1", Role.CUSTOMER)
        claims = jwt.decode(token, options={"verify_signature": False})
        claims["role"] = "admin"
        forged = jwt.encode(claims, "not-the-real-secret-but-long-enough-too", algorithm="HS256")
        with pytest.raises(Unauthorized):
            authenticate(f"Bearer {forged}", tokens)


class TestAuthorize:
    def test_allowed(self):
        authorize(Principal("u", Role.ADMIN), [Role.ADMIN])

    def test_customer_on_admin_route(self):
        with pytest.raises(Forbidden):
            authorize(Principal("u", Role.CUSTOMER), [Role.ADMIN])

    def test_empty_allow_list_denies_everyone(self):
        with pytest.raises(Forbidden):
            authorize(Principal("u", Role.ADMIN), [])
