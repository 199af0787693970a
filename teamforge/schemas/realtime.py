"""Real-time message envelope shared by clients and the relay."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RealtimeMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: str
    data: Any = None
    timestamp: Optional[int] = None
    user_id: Optional[int] = Field(default=None, alias="userId")
