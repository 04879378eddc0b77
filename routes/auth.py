import secrets

from flask import Blueprint, current_app, g, jsonify, redirect, request, session

from config import SHOPIFY_API_KEY
from models import ShopSession
from services.shopify_auth import (
    OAuthError,
    SessionTokenError,
    build_authorize_url,
    decode_session_token,
    exchange_code_for_token,
    is_valid_shop_domain,
    verify_oauth_hmac,
)
from utils.redaction import redact_token

auth_bp = Blueprint('auth', __name__)

OAUTH_STATE_KEY = "shopify_oauth_state"


def normalize_shop(raw):
    return (raw or "").strip().lower()


def session_token_from_request(req):
    """
    App Bridge sends the session token as a bearer header on fetches and as
    the id_token query param on the initial document load.
    """
    header = req.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):].strip()
    return req.args.get("id_token")


def load_shop_session(req):
    """flask-login request_loader: session token -> ShopSession (or None)."""
    token = session_token_from_request(req)
    if not token:
        return None

    try:
        shop = decode_session_token(token)
    except SessionTokenError as e:
        current_app.logger.warning(f"[Auth] Rejected session token: {e}")
        return None

    g.token_shop = shop
    shop_session = ShopSession.get(shop)
    if shop_session is None:
        current_app.logger.info(f"[Auth] No offline session stored for {shop}")
        return None

    g.shop = shop
    return shop_session


@auth_bp.route("/auth")
def begin():
    """Start the OAuth install flow for ?shop=<name>.myshopify.com."""
    shop = normalize_shop(request.args.get("shop"))
    if not is_valid_shop_domain(shop):
        return jsonify({"error": "invalid shop domain"}), 400

    state = secrets.token_urlsafe(16)
    session[OAUTH_STATE_KEY] = state
    return redirect(build_authorize_url(shop, state))


@auth_bp.route("/auth/callback")
def callback():
    params = request.args.to_dict()
    # HMAC is computed over the raw params; only the session key is normalised
    shop = normalize_shop(params.get("shop"))

    if not is_valid_shop_domain(shop):
        return jsonify({"error": "invalid shop domain"}), 400

    if not verify_oauth_hmac(params):
        current_app.logger.warning(f"[OAuth] HMAC mismatch for {shop}")
        return jsonify({"error": "invalid hmac"}), 400

    expected_state = session.pop(OAUTH_STATE_KEY, None)
    if not expected_state or not secrets.compare_digest(expected_state, params.get("state", "")):
        current_app.logger.warning(f"[OAuth] State mismatch for {shop}")
        return jsonify({"error": "invalid state"}), 400

    try:
        token = exchange_code_for_token(shop, params.get("code", ""))
    except OAuthError as e:
        return jsonify({"error": str(e)}), 502

    ShopSession(shop=shop, access_token=token["access_token"], scope=token["scope"]).save()
    current_app.logger.info(
        f"[OAuth] Installed for {shop} (scope={token['scope']}, token={redact_token(token['access_token'])})"
    )

    # Back into the Shopify admin, which loads /app in its iframe with an id_token
    return redirect(embedded_app_url(shop))


def embedded_app_url(shop):
    return f"https://{shop}/admin/apps/{SHOPIFY_API_KEY}"
