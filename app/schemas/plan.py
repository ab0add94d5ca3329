"""학습 계획 Pydantic 스키마.

Study plan request/response schemas.
Request fields accept the mobile client's camelCase keys (``dailyTime``,
``planId``) as well as snake_case names.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_list(value: Any) -> Any:
    """단일 값을 한 항목 목록으로 감쌉니다 (``"Variables"`` → ``["Variables"]``)."""
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        return [value] if value != "" else []
    return value


class PlanTopic(BaseModel):
    """계획 토픽 — 토픽 이름과 하위 토픽 목록."""

    model_config = ConfigDict(extra="allow")

    topic_name: str
    sub_topics: list[str] = Field(default_factory=list)

    @field_validator("sub_topics", mode="before")
    @classmethod
    def wrap_sub_topics(cls, value: Any) -> Any:
        return _as_list(value)


class PlanDay(BaseModel):
    """계획의 하루 항목.

    ``topics`` / ``activities`` given as a single string or object by the
    model are wrapped into one-item lists before validation.
    """

    model_config = ConfigDict(extra="allow")

    day: int
    topics: list[PlanTopic | str] = Field(default_factory=list)
    activities: list[str | dict[str, Any]] = Field(default_factory=list)
    time_required: int | str | None = None

    @field_validator("topics", "activities", mode="before")
    @classmethod
    def wrap_items(cls, value: Any) -> Any:
        return _as_list(value)


class PlanDocument(BaseModel):
    """LLM이 생성한 계획 문서 스키마 (Plan document extracted from model output).

    Unknown keys are kept so the stored document matches what the model sent.
    """

    model_config = ConfigDict(extra="allow")

    title: str | None = None
    subject: str | None = None
    level: str | None = None
    duration: str | None = None
    daily_time: str | None = None
    total_days: int | str | None = None
    days: list[PlanDay]


class GeneratePlanRequest(BaseModel):
    """학습 계획 생성 요청 스키마.

    Attributes:
        subject: 학습 과목 (Subject to study)
        level: 난이도 (beginner / intermediate / advanced, case-insensitive)
        duration: 기간 (Free text, e.g. "2 weeks")
        daily_time: 일일 학습 시간 (Free text, e.g. "1 hour")
        goals: 학습 목표 (Optional goals passed to the prompt)
    """

    model_config = ConfigDict(populate_by_name=True)

    subject: str = Field(min_length=1)
    level: Literal["beginner", "intermediate", "advanced"]
    duration: str = Field(min_length=1)
    daily_time: str = Field(min_length=1, alias="dailyTime")
    goals: str | None = None

    @field_validator("level", mode="before")
    @classmethod
    def lower_level(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("subject", "duration", "daily_time")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class UpdatePlanRequest(BaseModel):
    """피드백 기반 계획 수정 요청 스키마."""

    model_config = ConfigDict(populate_by_name=True)

    plan_id: str = Field(min_length=1, alias="planId")
    feedback: str = Field(min_length=1)


class ProgressUpdateRequest(BaseModel):
    """진행 맵 교체 요청 스키마.

    ``progress`` replaces the stored map as a whole:
    {"day_1": {"topic_0": true, "subtopic_0_1": false}, ...}
    """

    progress: dict[str, dict[str, bool]]


class GeneratePlanResponse(BaseModel):
    """계획 생성 응답 — 모바일 클라이언트 형식 ({plan, planId})."""

    model_config = ConfigDict(populate_by_name=True)

    plan: dict[str, Any]
    plan_id: str = Field(serialization_alias="planId")


class UpdatePlanResponse(BaseModel):
    plan: dict[str, Any]


class PlanResponse(BaseModel):
    """저장된 계획 응답 스키마.

    Attributes:
        id: 계획 UUID (Plan identifier)
        user_id: 소유 사용자 UUID (Owner, None for guest plans)
        plan: 계획 문서 (Plan document)
        progress: 진행 맵 (Progress map)
        completion: 완료율 0–100 (Completion percentage)
        day_completion: 일자별 완료율 ({"day_1": 50, ...})
    """

    id: str
    user_id: str | None
    plan: dict[str, Any]
    progress: dict[str, Any]
    completion: int
    day_completion: dict[str, int]
    created_at: datetime
    updated_at: datetime


class PlanVersionResponse(BaseModel):
    id: str
    plan: dict[str, Any]
    feedback: str
    created_at: datetime


class SubjectProgress(BaseModel):
    subject: str
    progress: float  # 과목별 평균 완료율 (Average completion across the subject's plans)
    plans: int


class ProgressSummaryResponse(BaseModel):
    """사용자 전체 진행 요약 응답 스키마 (GET /progress/{user_id})."""

    total_plans: int
    completed_plans: int
    subject_breakdown: list[SubjectProgress]
    achievements: list[str]
