from pydantic import BaseModel, EmailStr, Field


class StudentRegisterRequest(BaseModel):
    full_name: str = Field(alias="fullName", min_length=1, max_length=120)
    email: EmailStr
    enrollment_number: str = Field(alias="enrollmentNumber", min_length=1, max_length=50)
    branch: str = Field(min_length=1, max_length=60)
    year: str = Field(min_length=1, max_length=10)
    device_id: str = Field(alias="deviceId", min_length=1, max_length=255)

    class Config:
        populate_by_name = True


class VerifyRegistrationRequest(BaseModel):
    email: EmailStr
    otp: str = Field(min_length=6, max_length=6)


class StudentLoginRequest(BaseModel):
    email: EmailStr
    device_id: str = Field(alias="deviceId", min_length=1, max_length=255)

    class Config:
        populate_by_name = True


class StudentVerifyLoginRequest(BaseModel):
    email: EmailStr
    otp: str = Field(min_length=6, max_length=6)
    device_id: str = Field(alias="deviceId", min_length=1, max_length=255)

    class Config:
        populate_by_name = True


class DeviceChangeRequestCreate(BaseModel):
    new_device_id: str = Field(alias="newDeviceId", min_length=1, max_length=255)
    reason: str | None = Field(default=None, max_length=500)

    class Config:
        populate_by_name = True
