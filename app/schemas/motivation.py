"""동기부여 Pydantic 스키마.

Motivation request/response schemas.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MotivationRequest(BaseModel):
    """동기부여 메시지 생성 요청.

    emotion이 없고 userFeedback이 있으면 먼저 감정을 추론합니다.
    When no emotion is given but feedback text is, the emotion is inferred first.
    """

    model_config = ConfigDict(populate_by_name=True)

    subject: str = Field(min_length=1, max_length=255)
    emotion: str | None = Field(default=None, max_length=64)
    progress: str | None = Field(default=None, max_length=255)
    user_feedback: str | None = Field(default=None, max_length=2000, alias="userFeedback")


class MotivationResponse(BaseModel):
    motivation: str
    emotion: str | None = None


class EmotionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_text: str = Field(min_length=1, max_length=2000, alias="userText")


class EmotionResponse(BaseModel):
    emotion: str


class MotivationHistoryResponse(BaseModel):
    id: str
    user_id: str
    subject: str | None
    emotion: str | None
    progress: str | None
    motivation: str
    created_at: datetime
