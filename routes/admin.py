"""
Embedded admin routes (JSON view models for the App Bridge UI).

Routes:
- GET  /app                   - list the shop's QR codes
- GET  /app/qrcodes/new       - blank form state
- GET  /app/qrcodes/<id>      - one QR code, supplemented
- POST /app/qrcodes/<id|new>  - create, update or delete (action=delete)
"""
from flask import Blueprint, current_app, jsonify, redirect, request, url_for
from flask_login import current_user, login_required

from constants import DEFAULT_DESTINATION
from services.qr_codes import (
    InvariantError,
    create_qr_code,
    delete_qr_code,
    get_qr_code,
    get_qr_codes,
    update_qr_code,
    validate_qr_code,
)
from services.shopify_admin import AdminClient, ShopifyAPIError

admin_bp = Blueprint('admin', __name__, url_prefix='/app')

NEW_ID = "new"


def _graphql():
    return AdminClient(current_user.shop, current_user.access_token).graphql


def _parse_id(qr_id):
    # int() would also take " 7 " and "1_0"
    if not (qr_id.isascii() and qr_id.isdigit()):
        return None
    return int(qr_id)


def _not_found():
    return jsonify({"error": "QR code not found"}), 404


@admin_bp.errorhandler(ShopifyAPIError)
def handle_shopify_error(e):
    current_app.logger.error(f"[Admin] Shopify API error: {e}")
    return jsonify({"error": "Shopify Admin API unavailable"}), 502


@admin_bp.errorhandler(InvariantError)
def handle_invariant_error(e):
    current_app.logger.error(f"[Admin] Invalid QR code record: {e}")
    return jsonify({"error": str(e)}), 422


@admin_bp.route("")
@login_required
def index():
    qr_codes = get_qr_codes(current_user.shop, _graphql())
    return jsonify({"qr_codes": qr_codes})


@admin_bp.route("/qrcodes/<qr_id>", methods=["GET"])
@login_required
def edit_qr_code(qr_id):
    if qr_id == NEW_ID:
        return jsonify({"destination": DEFAULT_DESTINATION, "title": ""})

    qr_code_id = _parse_id(qr_id)
    if qr_code_id is None:
        return _not_found()

    qr_code = get_qr_code(qr_code_id, _graphql(), shop=current_user.shop)
    if qr_code is None:
        return _not_found()
    return jsonify(qr_code)


@admin_bp.route("/qrcodes/<qr_id>", methods=["POST"])
@login_required
def save_qr_code(qr_id):
    shop = current_user.shop
    data = {**request.form.to_dict(), "shop": shop}

    qr_code_id = None
    if qr_id != NEW_ID:
        qr_code_id = _parse_id(qr_id)
        if qr_code_id is None:
            return _not_found()

    if data.get("action") == "delete":
        if qr_code_id is None or not delete_qr_code(qr_code_id, shop):
            return _not_found()
        return redirect(url_for("admin.index"))

    errors = validate_qr_code(data)
    if errors:
        return jsonify({"errors": errors}), 422

    if qr_code_id is None:
        qr_code = create_qr_code(data)
    else:
        qr_code = update_qr_code(qr_code_id, data, shop)
        if qr_code is None:
            return _not_found()

    return redirect(url_for("admin.edit_qr_code", qr_id=qr_code.id))
