from datetime import datetime

from pydantic import BaseModel


class InvitationResponse(BaseModel):
    invitation: str


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
