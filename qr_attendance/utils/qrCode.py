import base64
import io
import json

import qrcode


def build_qr_payload(session) -> dict:
    """What the student's scanner reads back out of the code."""
    return {
        "sessionId": session.session_id,
        "teacherId": session.teacher_id,
        "subjectId": session.subject_id,
        "latitude": session.latitude,
        "longitude": session.longitude,
        "expiresAt": session.expires_at.isoformat(),
    }


def render_qr_data_url(payload: dict) -> str:
    qr = qrcode.QRCode(border=2, box_size=10)
    qr.add_data(json.dumps(payload))
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    b64 = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/png;base64,{b64}"
