"""
Canonical URLs for a QR code.
The scan URL is what gets encoded into the image, so its format must not drift.
"""


def scan_url(base_url: str, qr_code_id) -> str:
    """
    Scan entrypoint encoded into the QR image.
    Format: {base_url}/qrcodes/{id}/scan
    """
    if qr_code_id in (None, ""):
        raise ValueError("qr_code_id is required for scan URL")

    clean_base = base_url.rstrip('/')
    return f"{clean_base}/qrcodes/{qr_code_id}/scan"


def public_url(base_url: str, qr_code_id) -> str:
    """
    Public page showing the QR code.
    Format: {base_url}/qrcodes/{id}
    """
    if qr_code_id in (None, ""):
        raise ValueError("qr_code_id is required for public URL")

    clean_base = base_url.rstrip('/')
    return f"{clean_base}/qrcodes/{qr_code_id}"
