from typing import Literal, Optional

from pydantic import BaseModel, Field


class ProcessDeviceRequest(BaseModel):
    action: Literal["approve", "reject"]
    admin_notes: Optional[str] = Field(default=None, alias="adminNotes", max_length=500)

    class Config:
        populate_by_name = True
