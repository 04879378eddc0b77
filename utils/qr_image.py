import base64
import io
import logging

import qrcode
from PIL import Image

logger = logging.getLogger(__name__)


def render_qr_png(data: str, *, size_px: int | None = None) -> bytes:
    """
    Render a QR code as PNG bytes.

    ECC M with a standard 4-module quiet zone. When size_px is given the
    image is resized to a square of that many pixels.
    """
    if not data:
        raise ValueError("data is required to render a QR code")

    qr = qrcode.QRCode(
        version=None,  # Auto
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=4,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    qr_img = qr.make_image(fill_color="black", back_color="white").convert('RGB')

    if size_px:
        # NEAREST keeps module edges crisp
        qr_img = qr_img.resize((size_px, size_px), resample=Image.Resampling.NEAREST)

    out = io.BytesIO()
    qr_img.save(out, format='PNG')
    return out.getvalue()


def png_data_url(png_bytes: bytes) -> str:
    """Wrap PNG bytes in a base64 data URL for <img src> and downloads."""
    encoded = base64.b64encode(png_bytes).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def render_qr_data_url(data: str) -> str:
    return png_data_url(render_qr_png(data))
