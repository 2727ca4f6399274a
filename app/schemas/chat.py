from typing import List, Optional, Union

from pydantic import BaseModel, Field

from app.schemas.base import CamelModel


class ChatMessage(BaseModel):
    role: str
    content: str


class ChatRequest(CamelModel):
    messages: List[ChatMessage] = []
    message: Optional[str] = None
    credit_score: Optional[Union[int, float, str]] = None
    credit_analysis_date: Optional[str] = None

    def last_user_message(self) -> Optional[str]:
        for item in reversed(self.messages):
            if item.role == "user" and item.content:
                return item.content
        return self.message or None


class ChatReply(BaseModel):
    id: str
    role: str = Field(default="assistant")
    content: str
    message: str
