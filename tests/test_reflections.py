"""
Integration tests for monthly reflections.
"""
from habitpulse.models import MonthlyReflection

MARCH = {"year": 2026, "month": 3}


class TestReflections:
    def test_month_without_reflection_is_empty(self, client, headers):
        r = client.get("/reflections", params=MARCH, headers=headers)
        assert r.status_code == 200
        body = r.json()
        assert body["id"] is None
        assert body["content"] == ""
        assert (body["year"], body["month"]) == (2026, 3)

    def test_save_then_read(self, client, headers):
        r = client.post("/reflections", json={**MARCH, "content": "Mornings worked."}, headers=headers)
        assert r.status_code == 200
        assert r.json()["id"] is not None

        r = client.get("/reflections", params=MARCH, headers=headers)
        assert r.json()["content"] == "Mornings worked."

    def test_second_save_replaces_content(self, client, headers, db, user_id):
        first = client.post("/reflections", json={**MARCH, "content": "draft"}, headers=headers).json()
        second = client.post("/reflections", json={**MARCH, "content": "final"}, headers=headers).json()

        assert second["id"] == first["id"]
        assert second["content"] == "final"
        db.expire_all()
        assert db.query(MonthlyReflection).filter(MonthlyReflection.user_id == user_id).count() == 1

    def test_months_are_separate(self, client, headers):
        client.post("/reflections", json={**MARCH, "content": "march"}, headers=headers)

        r = client.get("/reflections", params={"year": 2026, "month": 4}, headers=headers)
        assert r.json()["content"] == ""

    def test_scoped_to_the_user(self, client, headers):
        client.post("/reflections", json={**MARCH, "content": "private"}, headers=headers)

        r = client.get("/reflections", params=MARCH, headers={"X-User-Id": "someone-else"})
        assert r.json()["content"] == ""

    def test_content_defaults_to_empty(self, client, headers):
        r = client.post("/reflections", json=MARCH, headers=headers)
        assert r.status_code == 200
        assert r.json()["content"] == ""


class TestReflectionValidation:
    def test_year_and_month_are_required(self, client, headers):
        r = client.get("/reflections", params={"year": 2026}, headers=headers)
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_month_out_of_range(self, client, headers):
        r = client.post("/reflections", json={"year": 2026, "month": 13}, headers=headers)
        assert r.status_code == 422
