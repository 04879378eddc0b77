from flask import Blueprint, current_app, jsonify, request

from database import get_db
from models import ShopSession
from services.shopify_auth import is_valid_shop_domain, verify_webhook_hmac

webhooks_bp = Blueprint('webhooks', __name__, url_prefix='/webhooks')


def _reject_unverified(topic):
    """Error response for a badly signed or unattributable webhook, else None."""
    if not verify_webhook_hmac(request.get_data(), request.headers.get("X-Shopify-Hmac-Sha256")):
        current_app.logger.warning(f"[Webhook] {topic} with invalid HMAC")
        return jsonify({"error": "Invalid signature"}), 401

    if not is_valid_shop_domain(request.headers.get("X-Shopify-Shop-Domain", "")):
        current_app.logger.warning(f"[Webhook] {topic} without a valid shop domain")
        return jsonify({"error": "Invalid shop domain"}), 400
    return None


@webhooks_bp.route("/app/uninstalled", methods=["POST"])
def app_uninstalled():
    rejected = _reject_unverified("app/uninstalled")
    if rejected:
        return rejected
    shop = request.headers["X-Shopify-Shop-Domain"]

    # Webhooks can arrive after a previous uninstall already removed the session
    deleted = ShopSession.delete_for_shop(shop)
    current_app.logger.info(f"[Webhook] app/uninstalled for {shop} ({deleted} sessions removed)")
    return jsonify({"success": True}), 200


@webhooks_bp.route("/app/scopes_update", methods=["POST"])
def scopes_update():
    rejected = _reject_unverified("app/scopes_update")
    if rejected:
        return rejected
    shop = request.headers["X-Shopify-Shop-Domain"]

    body = request.get_json(silent=True) or {}
    current = body.get("current") or []
    scope = ",".join(current)

    db = get_db()
    db.execute(
        "UPDATE shopify_sessions SET scope = %s, updated_at = NOW() WHERE shop = %s",
        (scope, shop)
    )
    db.commit()
    current_app.logger.info(f"[Webhook] app/scopes_update for {shop}: {scope}")
    return jsonify({"success": True}), 200
