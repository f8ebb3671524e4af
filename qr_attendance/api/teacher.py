import logging

from fastapi import APIRouter

from qr_attendance.api.auth import teacher_dependency
from qr_attendance.api.dependencies import ledger_dependency, sessions_dependency
from qr_attendance.schemas.serializers import serialize_subject
from qr_attendance.schemas.teacher import GenerateQrRequest
from qr_attendance.utils.qrCode import build_qr_payload, render_qr_data_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/teacher", tags=["teacher"])


@router.get("/subjects")
def get_subjects(user: teacher_dependency, sessions: sessions_dependency):
    """Subjects assigned to the requesting teacher."""
    subjects = sessions.assigned_subjects(user["user_id"])
    return {"subjects": [serialize_subject(s) for s in subjects]}


@router.get("/active-sessions")
def get_active_sessions(user: teacher_dependency, sessions: sessions_dependency):
    return {"sessions": sessions.list_active_sessions(user["user_id"])}


@router.post("/generate-qr")
def generate_qr(
    body: GenerateQrRequest, user: teacher_dependency, sessions: sessions_dependency
):
    """Opens a new attendance session anchored at the teacher's location.

    Any session already open for this subject stops accepting scans.
    """
    session = sessions.create_session(
        user["user_id"], body.subject_id, body.latitude, body.longitude
    )
    payload = build_qr_payload(session)

    return {
        "message": "QR code generated successfully",
        "qrCode": render_qr_data_url(payload),
        "qrData": payload,
        "sessionId": session.session_id,
        "expiresAt": session.expires_at,
        "subject": serialize_subject(session.subject),
    }


@router.get("/attendance-report/{subject_id}")
def attendance_report(subject_id: int, user: teacher_dependency, ledger: ledger_dependency):
    report = ledger.attendance_report(user["user_id"], subject_id)
    report["subject"] = serialize_subject(report["subject"])
    return report
