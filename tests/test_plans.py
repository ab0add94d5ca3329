"""학습 계획 API 테스트 — 생성, 수정, 조회, 삭제, 진행 상태, 요약.

Plan API tests — Generation, feedback revision, history, progress, summary.
The Ollama client is replaced by the ``fake_llm`` fixture.
"""

import json
import uuid

from httpx import AsyncClient

from app.utils.exceptions import LLMServiceError
from tests.conftest import SAMPLE_PLAN, auth_header, fenced, make_plan

API = "/api"

GENERATED = {
    "study_plan": {
        "title": "Python beginner Study Plan",
        "duration": "2 weeks",
        "daily_time": "1 hour/day",
        "days": [
            {
                "day": 1,
                "topics": [{"topic_name": "Syntax", "sub_topics": ["Variables"]}],
                "activities": [],
                "time_required": 60,
            },
            {"day": 2, "topics": [], "activities": ["Practice"], "time_required": 60},
        ],
    }
}

REVISED = {
    "study_plan": {
        "title": "Python beginner Study Plan (revised)",
        "subject": "Python",
        "level": "beginner",
        "days": [
            {"day": 1, "topics": ["Syntax", "Loops"], "activities": [], "time_required": 60},
        ],
    }
}

GENERATE_BODY = {
    "subject": "Python",
    "level": "Beginner",
    "duration": "2 weeks",
    "dailyTime": "1 hour",
}


# ===== Generate =====

class TestGeneratePlan:
    """계획 생성 테스트."""

    async def test_generate_plan(self, client: AsyncClient, user, user_token, fake_llm):
        """LLM 출력에서 계획을 추출하고 저장 — {plan, planId} 반환."""
        fake_llm.return_value = fenced(json.dumps(GENERATED))

        res = await client.post(f"{API}/generate-plan", json=GENERATE_BODY, headers=auth_header(user_token))

        assert res.status_code == 200
        data = res.json()
        assert data["plan"]["title"] == "Python beginner Study Plan"
        assert data["plan"]["subject"] == "Python"
        assert data["plan"]["level"] == "beginner"
        assert data["plan"]["total_days"] == 14
        assert len(data["plan"]["days"]) == 2

        prompt = fake_llm.await_args.args[0]
        assert "Python" in prompt
        assert "14 daily topics" in prompt

        stored = await client.get(f"{API}/plan/{data['planId']}", headers=auth_header(user_token))
        assert stored.status_code == 200
        assert stored.json()["user_id"] == str(user.id)
        assert stored.json()["progress"] == {}
        assert stored.json()["completion"] == 0

    async def test_generate_accepts_snake_case(self, client: AsyncClient, user_token, fake_llm):
        fake_llm.return_value = json.dumps(GENERATED)
        res = await client.post(f"{API}/generate-plan", json={
            "subject": "Python",
            "level": "advanced",
            "duration": "1 week",
            "daily_time": "2 hours",
            "goals": "Pass the exam",
        }, headers=auth_header(user_token))
        assert res.status_code == 200
        assert "Pass the exam" in fake_llm.await_args.args[0]

    async def test_generate_invalid_level(self, client: AsyncClient, user_token, fake_llm):
        """허용되지 않는 난이도 → 422, LLM 호출 없음."""
        body = {**GENERATE_BODY, "level": "expert"}
        res = await client.post(f"{API}/generate-plan", json=body, headers=auth_header(user_token))
        assert res.status_code == 422
        fake_llm.assert_not_awaited()

    async def test_generate_missing_field(self, client: AsyncClient, user_token, fake_llm):
        body = {k: v for k, v in GENERATE_BODY.items() if k != "dailyTime"}
        res = await client.post(f"{API}/generate-plan", json=body, headers=auth_header(user_token))
        assert res.status_code == 422

    async def test_generate_unparseable_output(self, client: AsyncClient, user, user_token, fake_llm):
        """JSON이 없는 출력 → 502, 계획 저장 안 됨."""
        fake_llm.return_value = "Sorry, I can't do that."
        res = await client.post(f"{API}/generate-plan", json=GENERATE_BODY, headers=auth_header(user_token))
        assert res.status_code == 502
        assert res.json()["detail"].startswith("Failed to generate study plan")

        plans = await client.get(f"{API}/plans/{user.id}", headers=auth_header(user_token))
        assert plans.json() == []

    async def test_generate_output_without_days(self, client: AsyncClient, user_token, fake_llm):
        fake_llm.return_value = '{"study_plan": {"title": "empty"}}'
        res = await client.post(f"{API}/generate-plan", json=GENERATE_BODY, headers=auth_header(user_token))
        assert res.status_code == 502

    async def test_generate_llm_unavailable(self, client: AsyncClient, user_token, fake_llm):
        """Ollama 연결 실패 → 502."""
        fake_llm.side_effect = LLMServiceError("Ollama request failed: ConnectError")
        res = await client.post(f"{API}/generate-plan", json=GENERATE_BODY, headers=auth_header(user_token))
        assert res.status_code == 502
        assert res.json()["detail"] == "Ollama request failed: ConnectError"

    async def test_generate_single_string_topics(self, client: AsyncClient, user_token, fake_llm):
        """문자열 하나로 된 topics/activities는 항목 하나로 저장되고 집계됨."""
        output = {"study_plan": {"days": [{"day": 1, "topics": "Variables", "activities": "Review"}]}}
        fake_llm.return_value = fenced(json.dumps(output))

        res = await client.post(f"{API}/generate-plan", json=GENERATE_BODY, headers=auth_header(user_token))
        assert res.status_code == 200
        day = res.json()["plan"]["days"][0]
        assert day["topics"] == ["Variables"]
        assert day["activities"] == ["Review"]

        plan_id = res.json()["planId"]
        res = await client.patch(
            f"{API}/plan/{plan_id}/progress",
            json={"progress": {"day_1": {"topic_0": True, "activity_0": True}}},
            headers=auth_header(user_token),
        )
        assert res.status_code == 200
        assert res.json()["completion"] == 100

    async def test_generate_malformed_day(self, client: AsyncClient, user, user_token, fake_llm):
        """day 번호가 없거나 토픽 이름이 없는 출력 → 502, 저장 안 됨."""
        for output in (
            {"days": [{"topics": ["Variables"]}]},
            {"days": [{"day": 1, "topics": [{"sub_topics": ["x"]}]}]},
        ):
            fake_llm.return_value = json.dumps(output)
            res = await client.post(f"{API}/generate-plan", json=GENERATE_BODY, headers=auth_header(user_token))
            assert res.status_code == 502

        plans = await client.get(f"{API}/plans/{user.id}", headers=auth_header(user_token))
        assert plans.json() == []

    async def test_generate_requires_auth(self, client: AsyncClient, fake_llm):
        res = await client.post(f"{API}/generate-plan", json=GENERATE_BODY)
        assert res.status_code in (401, 403)


# ===== Update (feedback revision) =====

class TestUpdatePlan:
    """피드백 기반 계획 수정 테스트."""

    async def test_update_plan_keeps_version(self, client: AsyncClient, db, user, user_token, fake_llm):
        """수정 전 문서와 피드백이 이력에 남고 진행 맵은 유지."""
        plan = await make_plan(db, user, SAMPLE_PLAN, {"day_1": {"topic_0": True}})
        fake_llm.return_value = fenced(json.dumps(REVISED))

        res = await client.post(f"{API}/update-plan", json={
            "planId": str(plan.id),
            "feedback": "Fewer sub-topics please",
        }, headers=auth_header(user_token))

        assert res.status_code == 200
        assert res.json()["plan"]["title"] == "Python beginner Study Plan (revised)"
        assert "Fewer sub-topics please" in fake_llm.await_args.args[0]

        stored = (await client.get(f"{API}/plan/{plan.id}", headers=auth_header(user_token))).json()
        assert stored["plan"]["title"] == "Python beginner Study Plan (revised)"
        assert stored["progress"] == {"day_1": {"topic_0": True}}
        # 2 leaves, 1 done
        assert stored["completion"] == 50

        versions = await client.get(f"{API}/plan/{plan.id}/versions", headers=auth_header(user_token))
        assert versions.status_code == 200
        assert len(versions.json()) == 1
        assert versions.json()[0]["feedback"] == "Fewer sub-topics please"
        assert versions.json()[0]["plan"]["title"] == SAMPLE_PLAN["title"]

    async def test_update_plan_put(self, client: AsyncClient, plan, user_token, fake_llm):
        fake_llm.return_value = json.dumps(REVISED)
        res = await client.put(f"{API}/update-plan", json={
            "plan_id": str(plan.id),
            "feedback": "More practice",
        }, headers=auth_header(user_token))
        assert res.status_code == 200

    async def test_update_unknown_plan(self, client: AsyncClient, user_token, fake_llm):
        res = await client.post(f"{API}/update-plan", json={
            "planId": str(uuid.uuid4()),
            "feedback": "x",
        }, headers=auth_header(user_token))
        assert res.status_code == 404
        fake_llm.assert_not_awaited()

    async def test_update_invalid_plan_id(self, client: AsyncClient, user_token, fake_llm):
        """UUID가 아닌 planId → 400."""
        res = await client.post(f"{API}/update-plan", json={
            "planId": "not-a-uuid",
            "feedback": "x",
        }, headers=auth_header(user_token))
        assert res.status_code == 400

    async def test_update_other_users_plan(self, client: AsyncClient, plan, other_token, fake_llm):
        """다른 사용자의 계획 수정 → 403."""
        res = await client.post(f"{API}/update-plan", json={
            "planId": str(plan.id),
            "feedback": "x",
        }, headers=auth_header(other_token))
        assert res.status_code == 403
        fake_llm.assert_not_awaited()

    async def test_update_bad_output_keeps_plan(self, client: AsyncClient, plan, user_token, fake_llm):
        """파싱 실패 시 502, 기존 계획과 이력은 그대로."""
        fake_llm.return_value = "no json"
        res = await client.post(f"{API}/update-plan", json={
            "planId": str(plan.id),
            "feedback": "x",
        }, headers=auth_header(user_token))
        assert res.status_code == 502

        versions = await client.get(f"{API}/plan/{plan.id}/versions", headers=auth_header(user_token))
        assert versions.json() == []


# ===== History / latest / single =====

class TestPlanQueries:
    """계획 조회 테스트."""

    async def test_list_plans_newest_first(self, client: AsyncClient, db, user, user_token):
        old = await make_plan(db, user, {**SAMPLE_PLAN, "title": "old"}, age_minutes=60)
        new = await make_plan(db, user, {**SAMPLE_PLAN, "title": "new"}, age_minutes=1)

        for path in ("plans", "study-plan-history"):
            res = await client.get(f"{API}/{path}/{user.id}", headers=auth_header(user_token))
            assert res.status_code == 200
            assert [p["id"] for p in res.json()] == [str(new.id), str(old.id)]

    async def test_list_other_users_plans(self, client: AsyncClient, user, other_token):
        res = await client.get(f"{API}/plans/{user.id}", headers=auth_header(other_token))
        assert res.status_code == 403

    async def test_latest_plan(self, client: AsyncClient, db, user, user_token):
        await make_plan(db, user, {**SAMPLE_PLAN, "title": "old"}, age_minutes=60)
        await make_plan(db, user, {**SAMPLE_PLAN, "title": "new"}, age_minutes=1)

        res = await client.get(f"{API}/study-plan-latest/{user.id}", headers=auth_header(user_token))
        assert res.status_code == 200
        assert res.json()["plan"]["title"] == "new"

    async def test_latest_plan_none(self, client: AsyncClient, user, user_token):
        """계획이 없으면 404."""
        res = await client.get(f"{API}/study-plan-latest/{user.id}", headers=auth_header(user_token))
        assert res.status_code == 404
        assert res.json()["detail"] == "No plans found"

    async def test_get_plan_with_completion(self, client: AsyncClient, db, user, user_token):
        plan = await make_plan(db, user, SAMPLE_PLAN, {"day_1": {"topic_0": True, "subtopic_0_0": True}})
        res = await client.get(f"{API}/plan/{plan.id}", headers=auth_header(user_token))
        assert res.status_code == 200
        data = res.json()
        assert data["completion"] == 25
        assert data["day_completion"] == {"day_1": 67, "day_2": 0, "day_3": 0}

    async def test_get_unknown_plan(self, client: AsyncClient, user_token):
        res = await client.get(f"{API}/plan/{uuid.uuid4()}", headers=auth_header(user_token))
        assert res.status_code == 404

    async def test_get_other_users_plan(self, client: AsyncClient, plan, other_token):
        res = await client.get(f"{API}/plan/{plan.id}", headers=auth_header(other_token))
        assert res.status_code == 403

    async def test_ownerless_plan_is_forbidden(self, client: AsyncClient, db, user_token):
        """user_id가 없는 계획은 누구에게도 제공되지 않음."""
        from app.models.plan import StudyPlan
        orphan = StudyPlan(user_id=None, plan=SAMPLE_PLAN, progress={})
        db.add(orphan)
        await db.flush()

        res = await client.get(f"{API}/plan/{orphan.id}", headers=auth_header(user_token))
        assert res.status_code == 403
        res = await client.patch(
            f"{API}/plan/{orphan.id}/progress",
            json={"progress": {"day_1": {"topic_0": True}}},
            headers=auth_header(user_token),
        )
        assert res.status_code == 403
        res = await client.delete(f"{API}/plan/{orphan.id}", headers=auth_header(user_token))
        assert res.status_code == 403


# ===== Progress =====

class TestPlanProgress:
    """진행 상태 갱신 테스트."""

    async def test_update_progress(self, client: AsyncClient, plan, user_token):
        """진행 맵 교체 후 완료율 반환."""
        progress = {"day_1": {"topic_0": True}, "day_3": {"activity_0": True}}
        res = await client.patch(
            f"{API}/plan/{plan.id}/progress",
            json={"progress": progress},
            headers=auth_header(user_token),
        )
        assert res.status_code == 200
        data = res.json()
        assert data["progress"] == progress
        assert data["completion"] == 25
        assert data["day_completion"]["day_3"] == 100

    async def test_progress_replaces_whole_map(self, client: AsyncClient, plan, user_token):
        """이전 맵은 병합되지 않고 교체됨."""
        await client.patch(
            f"{API}/plan/{plan.id}/progress",
            json={"progress": {"day_1": {"topic_0": True}}},
            headers=auth_header(user_token),
        )
        res = await client.patch(
            f"{API}/update-plan-progress/{plan.id}",
            json={"progress": {"day_2": {"topic_1": True}}},
            headers=auth_header(user_token),
        )
        assert res.status_code == 200
        assert res.json()["progress"] == {"day_2": {"topic_1": True}}

    async def test_dangling_progress_keys_stored(self, client: AsyncClient, plan, user_token):
        """계획에 없는 키는 저장되지만 완료율에는 무시."""
        progress = {"day_1": {"topic_7": True}, "day_42": {"activity_0": True}}
        res = await client.patch(
            f"{API}/plan/{plan.id}/progress",
            json={"progress": progress},
            headers=auth_header(user_token),
        )
        assert res.status_code == 200
        assert res.json()["progress"] == progress
        assert res.json()["completion"] == 0

    async def test_progress_sequences_in_any_order(self, client: AsyncClient, db, user, user_token):
        """같은 항목을 다른 순서로 체크해도 완료율이 같음."""
        steps = [
            ("day_3", "activity_0"),
            ("day_1", "subtopic_0_1"),
            ("day_2", "topic_1"),
        ]
        completions = []
        for ordering in (steps, list(reversed(steps)), [steps[1], steps[2], steps[0]]):
            plan = await make_plan(db, user, SAMPLE_PLAN)
            progress: dict[str, dict[str, bool]] = {}
            for day, key in ordering:
                progress = {**progress, day: {**progress.get(day, {}), key: True}}
                res = await client.patch(
                    f"{API}/plan/{plan.id}/progress",
                    json={"progress": progress},
                    headers=auth_header(user_token),
                )
                assert res.status_code == 200
            completions.append(res.json()["completion"])

        # 3/8 = 37.5% → 38
        assert completions == [38, 38, 38]

    async def test_progress_invalid_body(self, client: AsyncClient, plan, user_token):
        res = await client.patch(
            f"{API}/plan/{plan.id}/progress",
            json={"progress": {"day_1": ["topic_0"]}},
            headers=auth_header(user_token),
        )
        assert res.status_code == 422

    async def test_progress_other_users_plan(self, client: AsyncClient, plan, other_token):
        res = await client.patch(
            f"{API}/plan/{plan.id}/progress",
            json={"progress": {}},
            headers=auth_header(other_token),
        )
        assert res.status_code == 403


# ===== Delete =====

class TestDeletePlan:
    """계획 삭제 테스트."""

    async def test_delete_plan(self, client: AsyncClient, plan, user_token):
        res = await client.delete(f"{API}/plan/{plan.id}", headers=auth_header(user_token))
        assert res.status_code == 200
        assert res.json() == {"message": "Plan deleted"}

        res = await client.get(f"{API}/plan/{plan.id}", headers=auth_header(user_token))
        assert res.status_code == 404

    async def test_delete_other_users_plan(self, client: AsyncClient, plan, other_token):
        res = await client.delete(f"{API}/plan/{plan.id}", headers=auth_header(other_token))
        assert res.status_code == 403

    async def test_delete_unknown_plan(self, client: AsyncClient, user_token):
        res = await client.delete(f"{API}/plan/{uuid.uuid4()}", headers=auth_header(user_token))
        assert res.status_code == 404


# ===== Summary =====

class TestProgressSummary:
    """전체 진행 요약 테스트."""

    async def test_summary(self, client: AsyncClient, db, user, user_token):
        done = {
            "day_1": {"topic_0": True, "subtopic_0_0": True, "subtopic_0_1": True},
            "day_2": {"topic_0": True, "subtopic_0_0": True, "subtopic_0_1": True, "topic_1": True},
            "day_3": {"activity_0": True},
        }
        await make_plan(db, user, SAMPLE_PLAN, done)
        await make_plan(db, user, SAMPLE_PLAN, {})

        res = await client.get(f"{API}/progress/{user.id}", headers=auth_header(user_token))

        assert res.status_code == 200
        data = res.json()
        assert data["total_plans"] == 2
        assert data["completed_plans"] == 1
        assert data["subject_breakdown"] == [{"subject": "Python", "progress": 50.0, "plans": 2}]
        assert data["achievements"] == ["First Plan Created", "Plan Completed"]

    async def test_summary_empty(self, client: AsyncClient, user, user_token):
        res = await client.get(f"{API}/progress/{user.id}", headers=auth_header(user_token))
        assert res.status_code == 200
        assert res.json()["total_plans"] == 0
        assert res.json()["achievements"] == []

    async def test_summary_other_user(self, client: AsyncClient, user, other_token):
        res = await client.get(f"{API}/progress/{user.id}", headers=auth_header(other_token))
        assert res.status_code == 403
