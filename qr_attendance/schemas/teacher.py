from pydantic import BaseModel, EmailStr, Field


class EmailLoginRequest(BaseModel):
    """Teacher and admin logins: email only, no device binding."""

    email: EmailStr


class EmailVerifyLoginRequest(BaseModel):
    email: EmailStr
    otp: str = Field(min_length=6, max_length=6)


class GenerateQrRequest(BaseModel):
    subject_id: int = Field(alias="subjectId", gt=0)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    class Config:
        populate_by_name = True
