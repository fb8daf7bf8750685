"""QR code rendering for event passes."""

import segno

from app.core.constants import QR_CODE_MARGIN, QR_CODE_WIDTH


def qr_data_url(content: str, width: int = QR_CODE_WIDTH, margin: int = QR_CODE_MARGIN) -> str:
    """PNG data URL of a QR code for `content`, close to `width` pixels wide."""
    qr = segno.make(content, error="m")
    modules, _ = qr.symbol_size(scale=1, border=margin)
    scale = max(1, width // modules)
    return qr.png_data_uri(scale=scale, border=margin)
