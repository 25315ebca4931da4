"""
Integration tests for sub-task habits: toggles, the habit_progress cache
and the derived completion entry.
"""
from datetime import date

import pytest

from habitpulse.models import HabitEntry, HabitProgress, ProgressRuleName
from habitpulse.services import habits as habit_service
from habitpulse.services.completions import toggle_sub_task

DAY = "2026-03-10"


def _sub_task_habit(client, headers, rule: str = "ALL", threshold: int = 100, tasks: int = 2) -> tuple[int, list[int]]:
    r = client.post(
        "/habits",
        json={"name": "Morning routine", "has_sub_tasks": True, "progress_rule": rule, "completion_threshold": threshold},
        headers=headers,
    )
    assert r.status_code == 201
    habit_id = r.json()["id"]

    ids = []
    for i in range(tasks):
        r = client.post(f"/habits/{habit_id}/sub-tasks", json={"title": f"Step {i + 1}", "position": i}, headers=headers)
        assert r.status_code == 201
        ids.append(r.json()["id"])
    return habit_id, ids


def _toggle(client, headers, sub_task_id: int, day: str = DAY):
    r = client.post(f"/sub-tasks/{sub_task_id}/toggle", json={"day": day}, headers=headers)
    assert r.status_code == 200
    return r.json()


def _entry_days(client, headers) -> list[str]:
    r = client.get("/entries", params={"start": "2026-03-01", "end": "2026-03-31"}, headers=headers)
    return [e["day"] for e in r.json()]


class TestSubTaskToggle:
    def test_partial_then_complete_then_undone(self, client, headers):
        habit_id, (first, second) = _sub_task_habit(client, headers)

        body = _toggle(client, headers, first)
        assert body["completed"] is True
        assert body["progress"]["completion_percentage"] == 50
        assert body["progress"]["is_completed"] is False
        assert body["progress"]["status"]["status"] == "partial"
        assert _entry_days(client, headers) == []

        body = _toggle(client, headers, second)
        assert body["progress"]["is_completed"] is True
        assert body["progress"]["status"]["description"] == "2/2 sub-tasks done"
        assert _entry_days(client, headers) == [DAY]

        body = _toggle(client, headers, second)
        assert body["completed"] is False
        assert _entry_days(client, headers) == []

    def test_derived_completion_feeds_rollups(self, client, headers):
        habit_id, ids = _sub_task_habit(client, headers)
        for sub_task_id in ids:
            _toggle(client, headers, sub_task_id)

        r = client.get("/progress/weekly", params={"week_of": DAY}, headers=headers)
        assert r.json()["habits"][0]["completed"] == 1
        assert r.json()["habits"][0]["ratio"] == "1/7"

    def test_cache_row_matches_calculation(self, client, headers, db):
        habit_id, (first, _) = _sub_task_habit(client, headers)
        _toggle(client, headers, first)

        row = (
            db.query(HabitProgress)
            .filter(HabitProgress.habit_id == habit_id, HabitProgress.day == date(2026, 3, 10))
            .one()
        )
        assert row.completion_percentage == 50
        assert row.completed_sub_tasks == 1
        assert row.total_sub_tasks == 2

    def test_archived_habit_rejects_sub_task_toggle(self, client, headers):
        habit_id, (first, _) = _sub_task_habit(client, headers)
        client.delete(f"/habits/{habit_id}", headers=headers)

        r = client.post(f"/sub-tasks/{first}/toggle", json={"day": DAY}, headers=headers)
        assert r.status_code == 409
        assert r.json()["code"] == "HABIT_ARCHIVED"

    def test_unknown_sub_task(self, client, headers):
        r = client.post("/sub-tasks/999999/toggle", json={"day": DAY}, headers=headers)
        assert r.status_code == 404
        assert r.json()["code"] == "SUB_TASK_NOT_FOUND"


class TestCacheRefreshOnChanges:
    def test_rule_change_reevaluates_cached_days(self, client, headers):
        habit_id, (first, _) = _sub_task_habit(client, headers)
        _toggle(client, headers, first)
        assert _entry_days(client, headers) == []

        r = client.patch(
            f"/habits/{habit_id}",
            json={"progress_rule": "PERCENTAGE", "completion_threshold": 50},
            headers=headers,
        )
        assert r.status_code == 200
        assert r.json()["progress_rule"] == "PERCENTAGE"
        assert _entry_days(client, headers) == [DAY]

    def test_deleting_a_sub_task_can_complete_the_day(self, client, headers):
        habit_id, (first, second) = _sub_task_habit(client, headers)
        _toggle(client, headers, first)

        r = client.delete(f"/sub-tasks/{second}", headers=headers)
        assert r.status_code == 204
        assert _entry_days(client, headers) == [DAY]

        r = client.get(f"/habits/{habit_id}/sub-tasks", headers=headers)
        assert [st["id"] for st in r.json()] == [first]

    def test_weight_change_under_points(self, client, headers):
        habit_id, (first, _) = _sub_task_habit(client, headers, rule="POINTS", threshold=60)
        body = _toggle(client, headers, first)
        assert body["progress"]["completion_percentage"] == 50
        assert _entry_days(client, headers) == []

        r = client.patch(f"/sub-tasks/{first}", json={"weight": 3}, headers=headers)
        assert r.status_code == 200
        assert r.json()["weight"] == 3
        assert _entry_days(client, headers) == [DAY]

        r = client.get(f"/habits/{habit_id}/progress", params={"day": DAY}, headers=headers)
        assert r.json()["completion_percentage"] == 75
        assert r.json()["earned_points"] == 3

    def test_adding_a_sub_task_can_uncomplete_the_day(self, client, headers):
        habit_id, ids = _sub_task_habit(client, headers)
        for sub_task_id in ids:
            _toggle(client, headers, sub_task_id)
        assert _entry_days(client, headers) == [DAY]

        client.post(f"/habits/{habit_id}/sub-tasks", json={"title": "Step 3"}, headers=headers)
        assert _entry_days(client, headers) == []


class TestProgressEndpoints:
    def test_progress_for_a_day(self, client, headers):
        habit_id, (first, _) = _sub_task_habit(client, headers)
        _toggle(client, headers, first)

        r = client.get(f"/habits/{habit_id}/progress", params={"day": DAY}, headers=headers)
        assert r.status_code == 200
        body = r.json()
        assert body["rule"] == "ALL"
        assert body["day"] == DAY
        assert [b["completed"] for b in body["breakdown"]] == [True, False]
        assert body["breakdown"][0]["contribution"] == 50

    def test_plain_habit_progress_has_no_rule(self, client, headers):
        habit_id = client.post("/habits", json={"name": "Walk"}, headers=headers).json()["id"]
        r = client.get(f"/habits/{habit_id}/progress", params={"day": DAY}, headers=headers)
        assert r.json()["rule"] is None
        assert r.json()["status"]["status"] == "not_started"

    def test_simulate_writes_nothing(self, client, headers):
        habit_id, ids = _sub_task_habit(client, headers)

        r = client.post(f"/habits/{habit_id}/progress/simulate", json={"completed_sub_task_ids": ids}, headers=headers)
        assert r.status_code == 200
        assert r.json()["is_completed"] is True
        assert _entry_days(client, headers) == []

    def test_rule_review(self, client, headers):
        habit_id, _ = _sub_task_habit(client, headers, rule="POINTS", threshold=80)
        r = client.get(f"/habits/{habit_id}/rule-review", headers=headers)
        assert r.status_code == 200
        body = r.json()
        assert body["validation"]["is_valid"] is True
        assert body["validation"]["warnings"] == ["All sub-tasks have equal weight. Consider PERCENTAGE rule instead"]
        assert body["advice"] == {"bottlenecks": [], "recommendations": []}

    def test_rule_review_flags_long_sub_tasks(self, client, headers):
        habit_id, _ = _sub_task_habit(client, headers, tasks=0)
        long_id = client.post(
            f"/habits/{habit_id}/sub-tasks",
            json={"title": "Meal prep", "estimated_minutes": 90},
            headers=headers,
        ).json()["id"]

        body = client.get(f"/habits/{habit_id}/rule-review", headers=headers).json()
        assert body["advice"]["bottlenecks"] == [long_id]
        assert body["advice"]["recommendations"] == ['Consider breaking down "Meal prep" into smaller steps']


class TestProgressCacheRead:
    def _row(self, db, habit_id: int) -> HabitProgress:
        return (
            db.query(HabitProgress)
            .filter(HabitProgress.habit_id == habit_id, HabitProgress.day == date(2026, 3, 10))
            .one()
        )

    def test_progress_is_served_from_the_cache_row(self, client, headers, db):
        habit_id, (first, _) = _sub_task_habit(client, headers)
        _toggle(client, headers, first)

        row = self._row(db, habit_id)
        row.completion_percentage = 42
        db.commit()

        r = client.get(f"/habits/{habit_id}/progress", params={"day": DAY}, headers=headers)
        assert r.json()["completion_percentage"] == 42
        assert [b["completed"] for b in r.json()["breakdown"]] == [True, False]

    def test_row_that_disagrees_with_the_logs_is_recomputed(self, client, headers, db):
        habit_id, (first, _) = _sub_task_habit(client, headers)
        _toggle(client, headers, first)

        row = self._row(db, habit_id)
        row.completion_percentage = 42
        row.completed_sub_tasks = 2
        db.commit()

        r = client.get(f"/habits/{habit_id}/progress", params={"day": DAY}, headers=headers)
        assert r.json()["completion_percentage"] == 50
        assert r.json()["completed_sub_tasks"] == 1

    def test_day_without_a_row_is_evaluated(self, client, headers):
        habit_id, _ = _sub_task_habit(client, headers)
        r = client.get(f"/habits/{habit_id}/progress", params={"day": "2026-03-01"}, headers=headers)
        assert r.status_code == 200
        assert r.json()["completion_percentage"] == 0
        assert r.json()["total_sub_tasks"] == 2


class TestHabitShape:
    def test_plain_history_locks_has_sub_tasks(self, client, headers):
        habit_id = client.post("/habits", json={"name": "Journal"}, headers=headers).json()["id"]
        for day in ("2026-03-08", "2026-03-09", "2026-03-10"):
            r = client.post("/entries/toggle", json={"habit_id": habit_id, "day": day}, headers=headers)
            assert r.json()["completed"] is True

        r = client.patch(f"/habits/{habit_id}", json={"has_sub_tasks": True}, headers=headers)
        assert r.status_code == 409
        assert r.json()["code"] == "HABIT_SHAPE_CONFLICT"
        assert r.json()["details"] == {"habit_id": habit_id}

        r = client.patch(f"/habits/{habit_id}", json={"has_sub_tasks": False}, headers=headers)
        assert r.status_code == 200
        assert _entry_days(client, headers) == ["2026-03-08", "2026-03-09", "2026-03-10"]

    def test_sub_task_history_locks_has_sub_tasks(self, client, headers):
        habit_id, ids = _sub_task_habit(client, headers)
        for sub_task_id in ids:
            _toggle(client, headers, sub_task_id)

        r = client.patch(f"/habits/{habit_id}", json={"has_sub_tasks": False}, headers=headers)
        assert r.status_code == 409
        assert _entry_days(client, headers) == [DAY]

    def test_flag_can_change_before_any_history(self, client, headers):
        habit_id = client.post("/habits", json={"name": "Journal"}, headers=headers).json()["id"]

        r = client.patch(f"/habits/{habit_id}", json={"has_sub_tasks": True}, headers=headers)
        assert r.status_code == 200
        assert r.json()["has_sub_tasks"] is True

        r = client.post(f"/habits/{habit_id}/sub-tasks", json={"title": "Write a page"}, headers=headers)
        assert r.status_code == 201

    def test_plain_habit_rejects_sub_tasks(self, client, headers):
        habit_id = client.post("/habits", json={"name": "Walk"}, headers=headers).json()["id"]

        r = client.post(f"/habits/{habit_id}/sub-tasks", json={"title": "Shoes on"}, headers=headers)
        assert r.status_code == 409
        assert r.json()["code"] == "HABIT_SHAPE_CONFLICT"
        assert client.get(f"/habits/{habit_id}/sub-tasks", headers=headers).json() == []

    def test_sub_task_of_a_plain_habit_cannot_be_toggled(self, client, headers):
        habit_id, (first, _) = _sub_task_habit(client, headers)
        assert client.patch(f"/habits/{habit_id}", json={"has_sub_tasks": False}, headers=headers).status_code == 200

        r = client.post(f"/sub-tasks/{first}/toggle", json={"day": DAY}, headers=headers)
        assert r.status_code == 409
        assert r.json()["code"] == "HABIT_SHAPE_CONFLICT"
        assert _entry_days(client, headers) == []


class TestRefreshIsAtomic:
    def test_failed_day_rolls_back_the_whole_rule_change(self, db, user_id, monkeypatch):
        habit = habit_service.create_habit(db, user_id, name="Stretch", has_sub_tasks=True)
        hips = habit_service.create_sub_task(db, user_id, habit.id, title="Hips")
        habit_service.create_sub_task(db, user_id, habit.id, title="Back")
        toggle_sub_task(db, user_id, hips.id, date(2026, 3, 8))
        toggle_sub_task(db, user_id, hips.id, date(2026, 3, 9))

        real_refresh = habit_service.refresh_habit_progress
        refreshed = []

        def refresh_then_fail(db, habit, day):
            refreshed.append(day)
            if len(refreshed) > 1:
                raise RuntimeError("refresh failed")
            return real_refresh(db, habit, day)

        monkeypatch.setattr(habit_service, "refresh_habit_progress", refresh_then_fail)

        with pytest.raises(RuntimeError):
            habit_service.update_habit(
                db, user_id, habit.id,
                {"progress_rule": ProgressRuleName.PERCENTAGE, "completion_threshold": 50},
            )
        db.rollback()

        assert refreshed[0] == date(2026, 3, 8)
        row = (
            db.query(HabitProgress)
            .filter(HabitProgress.habit_id == habit.id, HabitProgress.day == date(2026, 3, 8))
            .one()
        )
        assert row.progress_rule == "ALL"
        assert row.is_completed is False
        assert db.query(HabitEntry).filter(HabitEntry.habit_id == habit.id).all() == []
        assert habit_service.get_habit(db, user_id, habit.id).progress_rule == ProgressRuleName.ALL
