"""
Shopify app authentication.

- OAuth install (authorization code grant) for the offline access token.
- HMAC verification for OAuth redirects and webhooks.
- App Bridge session tokens (JWT) for embedded admin requests.
"""
import base64
import hashlib
import hmac
import logging
from urllib.parse import urlencode, urlparse

import jwt
import requests

from config import SHOPIFY_API_KEY, SHOPIFY_API_SECRET, SHOPIFY_APP_URL, SCOPES
from constants import SHOP_DOMAIN_RE

logger = logging.getLogger(__name__)

TOKEN_EXCHANGE_TIMEOUT_SECONDS = 10

# Clock skew tolerated between Shopify and us
SESSION_TOKEN_LEEWAY_SECONDS = 10


class SessionTokenError(Exception):
    """Session token missing, malformed, expired or signed by someone else."""


class OAuthError(Exception):
    """OAuth callback failed verification or token exchange."""


def is_valid_shop_domain(shop) -> bool:
    return bool(shop) and bool(SHOP_DOMAIN_RE.match(shop))


def _hmac_sha256(message: bytes) -> bytes:
    return hmac.new(SHOPIFY_API_SECRET.encode("utf-8"), message, hashlib.sha256).digest()


def verify_oauth_hmac(params) -> bool:
    """
    Verify the hmac query param Shopify adds to OAuth redirects.
    Message is every other param sorted by key, joined as k=v&k=v.
    """
    received = params.get("hmac")
    if not received:
        return False

    message = "&".join(
        f"{k}={v}" for k, v in sorted(params.items()) if k not in ("hmac", "signature")
    )
    expected = _hmac_sha256(message.encode("utf-8")).hex()
    return hmac.compare_digest(expected, received)


def verify_webhook_hmac(body: bytes, header_value) -> bool:
    """Webhooks sign the raw body; header is base64."""
    if not header_value:
        return False
    expected = base64.b64encode(_hmac_sha256(body)).decode("ascii")
    return hmac.compare_digest(expected, header_value)


def decode_session_token(token: str) -> str:
    """
    Validate an App Bridge session token and return the shop domain it was
    issued for (taken from the `dest` claim).
    """
    if not token:
        raise SessionTokenError("missing session token")

    try:
        claims = jwt.decode(
            token,
            SHOPIFY_API_SECRET,
            algorithms=["HS256"],
            audience=SHOPIFY_API_KEY,
            leeway=SESSION_TOKEN_LEEWAY_SECONDS,
            options={"require": ["exp", "dest", "aud"]},
        )
    except jwt.PyJWTError as e:
        raise SessionTokenError(str(e)) from e

    shop = urlparse(claims["dest"]).hostname
    if not is_valid_shop_domain(shop):
        raise SessionTokenError(f"invalid dest claim: {claims['dest']}")
    return shop


def build_authorize_url(shop: str, state: str) -> str:
    query = urlencode({
        "client_id": SHOPIFY_API_KEY,
        "scope": SCOPES,
        "redirect_uri": f"{SHOPIFY_APP_URL}/auth/callback",
        "state": state,
    })
    return f"https://{shop}/admin/oauth/authorize?{query}"


def exchange_code_for_token(shop: str, code: str) -> dict:
    """
    Trade the authorization code for an offline access token.
    Returns {"access_token": ..., "scope": ...}.
    """
    try:
        resp = requests.post(
            f"https://{shop}/admin/oauth/access_token",
            json={
                "client_id": SHOPIFY_API_KEY,
                "client_secret": SHOPIFY_API_SECRET,
                "code": code,
            },
            timeout=TOKEN_EXCHANGE_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        logger.error(f"[OAuth] Token exchange with {shop} failed: {e}")
        raise OAuthError("token exchange failed") from e

    if not resp.ok:
        logger.error(f"[OAuth] Token exchange with {shop} returned {resp.status_code}")
        raise OAuthError(f"token exchange returned {resp.status_code}")

    data = resp.json()
    if not data.get("access_token"):
        raise OAuthError("token exchange response had no access_token")
    return {"access_token": data["access_token"], "scope": data.get("scope")}
