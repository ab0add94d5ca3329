"""학습 계획 진행률 계산 유틸리티.

Study plan progress accounting.
Walks the nested day → topic → sub-topic / activity structure of a plan and
looks up the matching completion flag in the progress map.

Progress Map Structure:
    {
        "day_1": {
            "topic_0": true,           # 첫 번째 토픽 (First topic of day 1)
            "subtopic_0_1": true,      # 토픽 0의 두 번째 하위 토픽
            "activity_0": false        # 첫 번째 활동 (First activity)
        },
        ...
    }

    인덱스는 0부터 시작. 계획에 없는 인덱스를 가리키는 키는 무시됩니다.
    Indices are 0-based. Keys pointing at items the plan does not have are ignored.
"""

from collections.abc import Iterator, Mapping, Sequence
from typing import Any

# 업적 배지 기준 — (배지 이름, 최소 계획 수, 최소 완료 계획 수)
# Achievement thresholds: (badge, min plans, min completed plans)
_ACHIEVEMENTS: list[tuple[str, int, int]] = [
    ("First Plan Created", 1, 0),
    ("Plan Completed", 0, 1),
    ("Study Enthusiast", 5, 0),
    ("Consistent Learner", 0, 3),
]


def day_key(day_number: Any) -> str:
    return f"day_{day_number}"


def topic_key(topic_index: int) -> str:
    return f"topic_{topic_index}"


def subtopic_key(topic_index: int, sub_index: int) -> str:
    return f"subtopic_{topic_index}_{sub_index}"


def activity_key(activity_index: int) -> str:
    return f"activity_{activity_index}"


def _items(value: Any) -> list[Any]:
    # 단일 값은 항목 하나 (A lone string or object is one item, never its characters)
    if isinstance(value, list):
        return value
    if value is None or value == "" or not isinstance(value, (str, Mapping)):
        return []
    return [value]


def iter_leaf_keys(day: Mapping[str, Any]) -> Iterator[str]:
    """하루 항목의 모든 리프 키를 순회합니다.

    Yield the progress key of every leaf item in one day: each topic, each of
    its sub-topics, and each activity. Bare-string topics have no sub-topics.
    A scalar ``topics`` / ``activities`` / ``sub_topics`` value is one item.
    """
    for topic_index, topic in enumerate(_items(day.get("topics"))):
        yield topic_key(topic_index)
        if isinstance(topic, Mapping):
            for sub_index in range(len(_items(topic.get("sub_topics")))):
                yield subtopic_key(topic_index, sub_index)

    for activity_index in range(len(_items(day.get("activities")))):
        yield activity_key(activity_index)


def _day_counts(day: Mapping[str, Any], progress: Mapping[str, Any]) -> tuple[int, int]:
    day_progress = progress.get(day_key(day.get("day"))) or {}
    if not isinstance(day_progress, Mapping):
        day_progress = {}

    completed = total = 0
    for key in iter_leaf_keys(day):
        total += 1
        if day_progress.get(key):
            completed += 1
    return completed, total


def count_items(
    days: Sequence[Mapping[str, Any]] | None,
    progress: Mapping[str, Any] | None,
) -> tuple[int, int]:
    """완료 항목 수와 전체 리프 항목 수를 반환합니다.

    Return ``(completed, total)`` leaf counts across all days.
    """
    completed = total = 0
    for day in days or []:
        if not isinstance(day, Mapping):
            continue
        day_completed, day_total = _day_counts(day, progress or {})
        completed += day_completed
        total += day_total
    return completed, total


def _percentage(completed: int, total: int) -> int:
    # 0.5는 올림 — Half rounds up, matching the mobile client's Math.round
    if total == 0:
        return 0
    return (completed * 200 + total) // (total * 2)


def calculate_completion_percentage(
    days: Sequence[Mapping[str, Any]] | None,
    progress: Mapping[str, Any] | None,
) -> int:
    """계획 전체 완료율(0–100)을 계산합니다.

    Compute the completion percentage of a plan as an integer in 0..100.

    Every topic, sub-topic and activity across all days is one leaf item.
    An item is complete when the flag at its progress key is truthy.
    Zero leaf items gives 0, never a division by zero.

    Args:
        days: 계획의 일자 목록 (The plan's ``days`` list)
        progress: 진행 맵 (Progress map keyed ``day_<n>`` → item key → flag)

    Returns:
        int: 반올림된 완료율 (Rounded completion percentage)
    """
    completed, total = count_items(days, progress)
    return _percentage(completed, total)


def day_completion(day: Mapping[str, Any], progress: Mapping[str, Any] | None) -> int:
    """하루 단위 완료율 (Completion percentage of a single day)."""
    completed, total = _day_counts(day, progress or {})
    return _percentage(completed, total)


def plan_completion(plan: Mapping[str, Any] | None, progress: Mapping[str, Any] | None) -> int:
    """저장된 계획 문서에서 완료율을 계산합니다.

    Convenience wrapper taking the stored plan document instead of its days.
    A missing plan or a plan without a ``days`` list is 0%.
    """
    if not plan or not isinstance(plan.get("days"), list):
        return 0
    return calculate_completion_percentage(plan["days"], progress)


def summarize_plans(plans: Sequence[tuple[Mapping[str, Any] | None, Mapping[str, Any] | None]]) -> dict[str, Any]:
    """사용자의 전체 계획 진행 요약을 생성합니다.

    Build a cross-plan progress summary from ``(plan, progress)`` pairs.

    Returns:
        dict: total_plans, completed_plans, subject_breakdown (과목별 평균 완료율),
              achievements (업적 배지 목록)
    """
    subjects: dict[str, list[int]] = {}
    completed_plans = 0

    for plan, progress in plans:
        percentage = plan_completion(plan, progress)
        if percentage >= 100:
            completed_plans += 1
        subject = str((plan or {}).get("subject") or "Unknown")
        subjects.setdefault(subject, []).append(percentage)

    total_plans = len(plans)
    breakdown = [
        {
            "subject": subject,
            "progress": round(sum(values) / len(values), 1),
            "plans": len(values),
        }
        for subject, values in subjects.items()
    ]
    achievements = [
        name
        for name, min_plans, min_completed in _ACHIEVEMENTS
        if total_plans >= min_plans and completed_plans >= min_completed
    ]

    return {
        "total_plans": total_plans,
        "completed_plans": completed_plans,
        "subject_breakdown": breakdown,
        "achievements": achievements,
    }
