import base64
import io

import qrcode
from flask import current_app



def render_token_png(token, box_size=None, border=None):
    """Render a QR code whose only payload is the bare reservation token."""
    config = current_app.config
    qr = qrcode.QRCode(
        border=border if border is not None else config.get('QR_BORDER', 2),
        box_size=box_size if box_size is not None else config.get('QR_BOX_SIZE', 10)
    )
    qr.add_data(token)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def render_token_data_url(token):
    png = render_token_png(token)
    return "data:image/png;base64," + base64.b64encode(png).decode("utf-8")
