# sigaapp/schemas/chat.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class ChatRequest(BaseModel):
    message: str


class ChatAction(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    executed: bool
    type: Optional[str] = None
    data: Optional[str] = None
    requires_confirmation: bool = Field(..., alias="requiresConfirmation")


class ChatResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool = False
    response: Optional[str] = None
    message: Optional[str] = None
    action: Optional[ChatAction] = None