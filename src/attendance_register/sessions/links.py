from __future__ import annotations

import io
from urllib.parse import urlencode

import qrcode


def checkin_url(base_url: str, session_id: str) -> str:
    """The link students open to check in to ``session_id``."""
    return f"{base_url.rstrip('/')}/checkin?{urlencode({'session': session_id})}"


def render_qr_png(url: str, *, box_size: int = 10, border: int = 2) -> bytes:
    qr = qrcode.QRCode(box_size=box_size, border=border)
    qr.add_data(url)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
