from pydantic import BaseModel, Field


class MarkAttendanceRequest(BaseModel):
    session_id: str = Field(alias="sessionId", min_length=1, max_length=64)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    class Config:
        populate_by_name = True
