import re

# Scan destinations
DESTINATION_PRODUCT = "product"
DESTINATION_CART = "cart"

DESTINATIONS = frozenset({DESTINATION_PRODUCT, DESTINATION_CART})

DEFAULT_DESTINATION = DESTINATION_PRODUCT

# Numeric variant id inside a Shopify variant GID
PRODUCT_VARIANT_GID_RE = re.compile(r"gid://shopify/ProductVariant/([0-9]+)")

# Columns a merchant may write through the admin form
QR_CODE_WRITABLE_FIELDS = (
    "title",
    "shop",
    "product_id",
    "product_handle",
    "product_variant_id",
    "destination",
)

# NOT NULL columns the admin form may leave out
QR_CODE_OPTIONAL_DEFAULTS = {
    "product_handle": "",
    "product_variant_id": "",
}

# Required admin form fields and their error messages (checked in order)
QR_CODE_REQUIRED_FIELDS = (
    ("title", "Title is required"),
    ("product_id", "Product is required"),
    ("destination", "Destination is required"),
)

NOT_FOUND_MESSAGE = "Could not find QR code destination"
UNRECOGNIZED_VARIANT_MESSAGE = "Unrecognized product variant ID"

# Shop domains accepted by the OAuth flow
SHOP_DOMAIN_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9\-]*\.myshopify\.com$")

# Product lookup used to supplement QR codes for the admin view
PRODUCT_QUERY = """
  query supplementQRCode($id: ID!) {
    product(id: $id) {
      title
      images(first: 1) {
        nodes {
          altText
          url
        }
      }
    }
  }
"""
