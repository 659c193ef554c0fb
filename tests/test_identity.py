import httpx
import pytest

from brew_cafe.errors import IdentityProviderError
from brew_cafe.services.identity import IdentityProvider


def provider(handler, api_key="anon"):
    return IdentityProvider("http://auth.test", api_key, transport=httpx.MockTransport(handler))


async def test_valid_token_returns_user():
    def handler(request):
        assert request.url.path == "/auth/v1/user"
        assert request.headers["authorization"] == "Bearer tok"
        assert request.headers["apikey"] == "anon"
        return httpx.Response(200, json={"id": "u-1", "email": "a@b.c"})

    user = await provider(handler).get_user("tok")

    assert user.id == "u-1"
    assert user.email == "a@b.c"


@pytest.mark.parametrize("status", [401, 403])
async def test_rejected_token_returns_none(status):
    user = await provider(lambda request: httpx.Response(status)).get_user("expired")
    assert user is None


async def test_provider_error_raises():
    with pytest.raises(IdentityProviderError):
        await provider(lambda request: httpx.Response(502)).get_user("tok")


async def test_unreachable_provider_raises():
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    with pytest.raises(IdentityProviderError):
        await provider(handler).get_user("tok")


async def test_no_apikey_header_without_key():
    def handler(request):
        assert "apikey" not in request.headers
        return httpx.Response(200, json={"id": "u-2"})

    user = await provider(handler, api_key="").get_user("tok")
    assert user.id == "u-2"
    assert user.email is None
