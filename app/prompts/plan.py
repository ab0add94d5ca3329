"""학습 계획 생성/수정 프롬프트 템플릿.

Prompt templates for study plan generation and feedback revision
(Mistral ``[INST]`` format, used by the fine-tuned EduPlanner model).
"""

import json
import re
from typing import Any

_WEEKS = re.compile(r"(\d+)\s*week", re.IGNORECASE)

# 기간을 해석할 수 없을 때의 기본 일수 (Default length when the duration has no week count)
DEFAULT_TOTAL_DAYS: int = 7

PLAN_GENERATION_PROMPT = """[INST]
You are EduPlanner, an AI-powered personalized study planning assistant. You generate adaptive, structured study plans in JSON format that align with individual learning preferences and academic goals. Your responses must be formatted exactly as requested.

The user wants to learn "{subject}" at a {level} level.
They can study {daily_time} per day for {duration}.{goals_line}

IMPORTANT REQUIREMENTS:
- Always include "title" field with format: "{{subject}} {{level}} Study Plan"
- "level" must be: Beginner, Intermediate, or Advanced
- "daily_time" format: "1 hour/day" or "2 hours/day"
- "time_required" must be 60 for 1hr/day plans, 120 for 2hr/day plans
- Days with topics should have empty "activities" array
- Days with activities should have empty "topics" array (for practice/review days)
- Each topic must have "topic_name" and "sub_topics" array
- Progressive difficulty within each level
- Realistic daily time allocation

Generate a complete plan with exactly **{total_days} daily topics**.

Return the result **exactly in this format**, wrapped in ```json``` markers:
```json
{example}
```
[/INST]"""

PLAN_REVISION_PROMPT = """[INST] Here is the current study plan in JSON:
```json
{current_plan}
```
User feedback: "{feedback}"
Revise the plan accordingly and return the updated JSON object named "study_plan" wrapped in ```json``` markers. [/INST]"""


def total_days_for(duration: str) -> int:
    """기간 문자열에서 총 일수를 계산합니다 ("2 weeks" → 14, 그 외 7)."""
    match = _WEEKS.search(duration or "")
    return int(match.group(1)) * 7 if match else DEFAULT_TOTAL_DAYS


def minutes_for(daily_time: str) -> int:
    """일일 학습 시간 힌트 — "1 hour" 포함 시 60분, 그 외 120분."""
    return 60 if "1 hour" in (daily_time or "") else 120


def build_generation_prompt(
    subject: str,
    level: str,
    duration: str,
    daily_time: str,
    goals: str | None = None,
) -> str:
    total_days = total_days_for(duration)
    example: dict[str, Any] = {
        "study_plan": {
            "title": f"{subject} {level} Study Plan",
            "subject": subject,
            "level": level,
            "duration": duration,
            "daily_time": daily_time,
            "total_days": total_days,
            "days": [
                {
                    "day": 1,
                    "topics": [
                        {
                            "topic_name": "Topic Name",
                            "sub_topics": ["Subtopic 1", "Subtopic 2", "Subtopic 3"],
                        }
                    ],
                    "activities": [],
                    "time_required": minutes_for(daily_time),
                }
            ],
        }
    }
    goals_line = f"\nTheir goals: {goals}" if goals else ""
    return PLAN_GENERATION_PROMPT.format(
        subject=subject,
        level=level,
        daily_time=daily_time,
        duration=duration,
        goals_line=goals_line,
        total_days=total_days,
        example=json.dumps(example, indent=2, ensure_ascii=False),
    )


def build_revision_prompt(current_plan: dict[str, Any], feedback: str) -> str:
    return PLAN_REVISION_PROMPT.format(
        current_plan=json.dumps(current_plan, indent=2, ensure_ascii=False),
        feedback=feedback,
    )
