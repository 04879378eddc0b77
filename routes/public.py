"""
Public QR code routes. No authentication: these are hit by customers'
phones and by anyone the merchant shares the page with.

Routes:
- GET /qrcodes/<id>            - page showing the title and QR image
- GET /qrcodes/<id>/image.png  - the QR image as a PNG file
- GET /qrcodes/<id>/scan       - scan entrypoint: count the scan, redirect to the store
"""
import io

from flask import Blueprint, abort, current_app, redirect, render_template, request, send_file

from config import SCAN_RATE_LIMIT, SHOPIFY_APP_URL
from constants import NOT_FOUND_MESSAGE
from extensions import limiter
from services.qr_codes import (
    InvariantError,
    find_qr_code,
    get_destination_url,
    get_qr_code_image,
    increment_scans,
)
from utils.qr_image import render_qr_png
from utils.qr_urls import scan_url

public_bp = Blueprint('public', __name__)

MIN_IMAGE_SIZE_PX = 64
MAX_IMAGE_SIZE_PX = 2048


def _find_or_404(qr_id):
    if not (qr_id.isascii() and qr_id.isdigit()):
        abort(404, description=NOT_FOUND_MESSAGE)

    qr_code = find_qr_code(int(qr_id))
    if qr_code is None:
        abort(404, description=NOT_FOUND_MESSAGE)
    return qr_code


@public_bp.route("/qrcodes/<qr_id>")
def show_qr_code(qr_id):
    qr_code = _find_or_404(qr_id)
    return render_template(
        "qrcodes/show.html",
        title=qr_code.title,
        image=get_qr_code_image(qr_code.id),
    )


@public_bp.route("/qrcodes/<qr_id>/image.png")
def qr_code_png(qr_id):
    qr_code = _find_or_404(qr_id)

    size_px = request.args.get("size", type=int)
    if size_px is not None:
        size_px = max(MIN_IMAGE_SIZE_PX, min(size_px, MAX_IMAGE_SIZE_PX))

    png = render_qr_png(scan_url(SHOPIFY_APP_URL, qr_code.id), size_px=size_px)
    return send_file(
        io.BytesIO(png),
        mimetype="image/png",
        as_attachment=request.args.get("download") == "1",
        download_name=f"qr-code-{qr_code.id}.png",
    )


@public_bp.route("/qrcodes/<qr_id>/scan")
@limiter.limit(SCAN_RATE_LIMIT)
def scan(qr_id):
    qr_code = _find_or_404(qr_id)

    try:
        destination = get_destination_url(qr_code)
    except InvariantError as e:
        current_app.logger.warning(f"[Scan] QR code {qr_code.id} has no usable destination: {e}")
        abort(404, description=str(e))

    increment_scans(qr_code.id)
    return redirect(destination)
