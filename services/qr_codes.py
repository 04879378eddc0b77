"""
QR code domain logic.

Records live in Postgres (models.QRCode). Everything the admin UI shows is a
record "supplemented" with live product data from the Shopify Admin API, the
destination URL a scan will redirect to, and the rendered image.

`graphql` arguments are callables with the signature
`graphql(query, variables=None) -> dict`, normally AdminClient.graphql.
"""
import logging

from config import SHOPIFY_APP_URL
from constants import (
    DESTINATION_PRODUCT,
    PRODUCT_QUERY,
    PRODUCT_VARIANT_GID_RE,
    QR_CODE_REQUIRED_FIELDS,
    UNRECOGNIZED_VARIANT_MESSAGE,
)
from models import QRCode
from utils.qr_image import render_qr_data_url
from utils.qr_urls import public_url, scan_url

logger = logging.getLogger(__name__)


class InvariantError(Exception):
    """A stored record is in a shape the app cannot act on."""


def _as_dict(qr_code):
    if isinstance(qr_code, QRCode):
        return qr_code.to_dict()
    return dict(qr_code)


def get_qr_code(qr_code_id, graphql, shop=None):
    """Fetch and supplement one QR code. Returns None when it does not exist."""
    logger.info("get_qr_code id=%s", qr_code_id)
    qr_code = QRCode.get(qr_code_id, shop=shop)

    if not qr_code:
        logger.info("QR code %s not found", qr_code_id)
        return None

    return supplement_qr_code(qr_code, graphql)


def get_qr_codes(shop, graphql):
    """All QR codes for a shop, newest first, supplemented."""
    qr_codes = QRCode.list_for_shop(shop)

    if not qr_codes:
        return []

    logger.info("Supplementing %d QR codes for %s", len(qr_codes), shop)
    return [supplement_qr_code(qr_code, graphql) for qr_code in qr_codes]


def get_qr_code_image(qr_code_id):
    """PNG data URL encoding the scan URL for this QR code."""
    return render_qr_data_url(scan_url(SHOPIFY_APP_URL, qr_code_id))


def get_destination_url(qr_code):
    """
    Where a scan lands.

    product -> https://{shop}/products/{handle}
    cart    -> https://{shop}/cart/{variant_id}:1  (quantity 1, straight to checkout)

    Raises InvariantError when the stored variant id is not a ProductVariant GID.
    """
    qr_code = _as_dict(qr_code)

    if qr_code.get('destination') == DESTINATION_PRODUCT:
        return f"https://{qr_code['shop']}/products/{qr_code['product_handle']}"

    match = PRODUCT_VARIANT_GID_RE.search(qr_code.get('product_variant_id') or '')
    if not match:
        raise InvariantError(UNRECOGNIZED_VARIANT_MESSAGE)

    return f"https://{qr_code['shop']}/cart/{match.group(1)}:1"


def supplement_qr_code(qr_code, graphql):
    """
    Merge a stored record with its product's title/image, its destination
    URL and its rendered image. A product that no longer exists (or has no
    title) is flagged with product_deleted rather than raising.
    """
    qr_code = _as_dict(qr_code)

    response = graphql(PRODUCT_QUERY, {"id": qr_code.get('product_id')})
    product = ((response or {}).get('data') or {}).get('product') or {}

    image_nodes = (product.get('images') or {}).get('nodes') or []
    first_image = image_nodes[0] if image_nodes else {}

    return {
        **qr_code,
        "product_deleted": not product.get('title'),
        "product_title": product.get('title'),
        "product_image": first_image.get('url'),
        "product_alt": first_image.get('altText'),
        "destination_url": get_destination_url(qr_code),
        "image": get_qr_code_image(qr_code['id']),
        "public_url": public_url(SHOPIFY_APP_URL, qr_code['id']),
    }


def validate_qr_code(data):
    """
    Check the admin form. Returns {field: message} for each missing field,
    or None when the data is valid.
    """
    errors = {}

    for field, message in QR_CODE_REQUIRED_FIELDS:
        value = data.get(field)
        if isinstance(value, str):
            value = value.strip()
        if not value:
            errors[field] = message

    if errors:
        return errors
    return None


# -----------------------------------------------------------------------------
# Persistence
# -----------------------------------------------------------------------------
def find_qr_code(qr_code_id):
    """Raw record lookup for public routes (no supplement, no shop scope)."""
    return QRCode.get(qr_code_id)


def create_qr_code(data):
    qr_code = QRCode.create(data)
    logger.info("Created QR code %s for %s", qr_code.id, qr_code.shop)
    return qr_code


def update_qr_code(qr_code_id, data, shop):
    qr_code = QRCode.update(qr_code_id, data, shop)
    if qr_code:
        logger.info("Updated QR code %s for %s", qr_code_id, shop)
    return qr_code


def delete_qr_code(qr_code_id, shop):
    deleted = QRCode.delete(qr_code_id, shop)
    if deleted:
        logger.info("Deleted QR code %s for %s", qr_code_id, shop)
    return deleted


def increment_scans(qr_code_id):
    QRCode.increment_scans(qr_code_id)
