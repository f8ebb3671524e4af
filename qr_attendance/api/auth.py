import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette import status

from qr_attendance.api.dependencies import identity_dependency
from qr_attendance.enums import Role
from qr_attendance.exceptions import AuthError, PermissionDeniedError
from qr_attendance.schemas.serializers import (
    serialize_admin,
    serialize_student,
    serialize_teacher,
)
from qr_attendance.schemas.student import (
    StudentLoginRequest,
    StudentRegisterRequest,
    StudentVerifyLoginRequest,
    VerifyRegistrationRequest,
)
from qr_attendance.schemas.teacher import EmailLoginRequest, EmailVerifyLoginRequest
from qr_attendance.utils import create_access_token, decode_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

bearer_scheme = HTTPBearer(auto_error=False)

OTP_SENT = "OTP sent successfully to your email"


# ---------------------------------------- Token dependencies
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
):
    if credentials is None or not credentials.credentials:
        raise AuthError("Access token required")
    return decode_token(credentials.credentials)


def require_role(role: Role):
    def dependency(current_user: dict = Depends(get_current_user)):
        if current_user["role"] != role.value:
            raise PermissionDeniedError("Not enough permissions")
        return current_user

    return dependency


get_current_student_user = require_role(Role.STUDENT)
get_current_teacher_user = require_role(Role.TEACHER)
get_current_admin_user = require_role(Role.ADMIN)

student_dependency = Annotated[dict, Depends(get_current_student_user)]
teacher_dependency = Annotated[dict, Depends(get_current_teacher_user)]
admin_dependency = Annotated[dict, Depends(get_current_admin_user)]


# ---------------------------------------- Student registration
@router.post("/student/register")
def register_student(body: StudentRegisterRequest, identity: identity_dependency):
    logger.info(f"Student registration request for {body.email}")
    identity.register_student(body.model_dump())
    return {"message": OTP_SENT, "email": body.email}


@router.post("/student/verify-registration", status_code=status.HTTP_201_CREATED)
def verify_registration(body: VerifyRegistrationRequest, identity: identity_dependency):
    student = identity.complete_registration(body.email, body.otp)
    token = create_access_token(
        student.id, student.email, Role.STUDENT.value, device_id=student.device_id
    )
    return {
        "message": "Registration completed successfully",
        "token": token,
        "student": serialize_student(student),
    }


# ---------------------------------------- Student login
@router.post("/student/login")
def login_student(body: StudentLoginRequest, identity: identity_dependency):
    identity.request_student_login(body.email, body.device_id)
    return {"message": OTP_SENT, "email": body.email}


@router.post("/student/verify-login")
def verify_student_login(body: StudentVerifyLoginRequest, identity: identity_dependency):
    student = identity.verify_student_login(body.email, body.otp, body.device_id)
    token = create_access_token(
        student.id, student.email, Role.STUDENT.value, device_id=student.device_id
    )
    return {
        "message": "Login successful",
        "token": token,
        "student": serialize_student(student),
    }


# ---------------------------------------- Teacher login
@router.post("/teacher/login")
def login_teacher(body: EmailLoginRequest, identity: identity_dependency):
    identity.request_teacher_login(body.email)
    return {"message": OTP_SENT, "email": body.email}


@router.post("/teacher/verify-login")
def verify_teacher_login(body: EmailVerifyLoginRequest, identity: identity_dependency):
    teacher = identity.verify_teacher_login(body.email, body.otp)
    token = create_access_token(teacher.id, teacher.email, Role.TEACHER.value)
    return {
        "message": "Login successful",
        "token": token,
        "teacher": serialize_teacher(teacher),
    }


# ---------------------------------------- Admin login
@router.post("/admin/login")
def login_admin(body: EmailLoginRequest, identity: identity_dependency):
    identity.request_admin_login(body.email)
    return {"message": OTP_SENT, "email": body.email}


@router.post("/admin/verify-login")
def verify_admin_login(body: EmailVerifyLoginRequest, identity: identity_dependency):
    admin = identity.verify_admin_login(body.email, body.otp)
    token = create_access_token(admin.id, admin.email, Role.ADMIN.value)
    return {
        "message": "Login successful",
        "token": token,
        "admin": serialize_admin(admin),
    }
