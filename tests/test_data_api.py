import pytest

from tests.conftest import FailingMirror


class TestAuthRequired:

    @pytest.mark.parametrize("path,body", [
        ("/data/profile", {"fullName": "Asha"}),
        ("/data/income", [{"source": "Salary", "amount": 1000, "frequency": "monthly"}]),
        ("/data/expense", [{"category": "Food", "amount": 10, "date": "2025-01-02"}]),
        ("/data/budget", [{"category": "Food", "monthlyAmount": 100}]),
        ("/data/goal", [{"name": "Car", "targetAmount": 1000, "targetDate": "2026-01-01"}]),
    ])
    def test_writes_need_a_session(self, client, path, body):
        response = client.post(path, json=body)
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_reads_need_a_session(self, client):
        assert client.get("/data/expenses").status_code == 401


class TestProfile:

    def test_save_profile(self, user_client, sql_repo, mirror):
        response = user_client.post("/data/profile", json={
            "fullName": "Asha Rao", "age": 31, "location": "Pune", "dependents": 1,
            "filingStatus": "individual", "creditScore": 760, "creditBand": "Excellent",
        })
        assert response.status_code == 200
        assert response.json() == {"ok": True}

        profile = sql_repo.get_profile(user_client.user_id)
        assert profile.full_name == "Asha Rao"
        assert profile.credit_score == 760
        assert mirror.calls[-1][0] == "update_user_profile"
        assert mirror.calls[-1][1][0] == user_client.user_id

    def test_me_prefers_profile_name(self, user_client):
        user_client.post("/data/profile", json={"fullName": "Asha Rao"})
        me = user_client.get("/me").json()
        assert me["user"]["name"] == "Asha Rao"
        assert me["profile"]["fullName"] == "Asha Rao"


class TestIncome:

    def test_add_income(self, user_client, sql_repo, mirror):
        response = user_client.post("/data/income", json=[
            {"source": "Salary", "amount": 85000, "frequency": "monthly"},
            {"source": "Bonus", "amount": 120000, "frequency": "annual"},
        ])
        assert response.json() == {"ok": True}

        stored = sql_repo.list_income(user_client.user_id)
        assert sorted(e.source for e in stored) == ["Bonus", "Salary"]

        name, args = mirror.calls[-1]
        assert name == "add_income_entries"
        assert {e.id for e in args[1]} == {e.id for e in stored}

    def test_mirror_failure_does_not_fail_the_request(self, api, user_client, sql_repo):
        api.state.mirror = FailingMirror()
        response = user_client.post("/data/income", json=[{"source": "Salary", "amount": 1000}])
        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert len(sql_repo.list_income(user_client.user_id)) == 1

    def test_unconfigured_mirror_is_skipped(self, api, user_client, sql_repo):
        api.state.mirror = None
        response = user_client.post("/data/income", json=[{"source": "Salary", "amount": 1000}])
        assert response.json() == {"ok": True}
        assert len(sql_repo.list_income(user_client.user_id)) == 1

    def test_non_positive_amount_is_rejected(self, user_client):
        response = user_client.post("/data/income", json=[{"source": "Salary", "amount": 0}])
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request format"


class TestExpenses:

    def test_month_filter(self, user_client):
        user_client.post("/data/expense", json=[
            {"category": "Food", "amount": 250, "date": "2025-03-01", "description": "Groceries"},
            {"category": "Travel", "amount": 900, "date": "2025-03-31"},
            {"category": "Food", "amount": 120, "date": "2025-04-01"},
        ])
        march = user_client.get("/data/expenses", params={"month": "2025-03"}).json()
        assert [e["date"] for e in march] == ["2025-03-01", "2025-03-31"]
        assert march[0]["description"] == "Groceries"
        assert len(user_client.get("/data/expenses").json()) == 3

    def test_bad_month(self, user_client):
        response = user_client.get("/data/expenses", params={"month": "2025-13"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid month"


class TestBudgetAndGoals:

    def test_budget_is_replaced(self, user_client, sql_repo):
        user_client.post("/data/budget", json=[
            {"category": "Food", "monthlyAmount": 8000},
            {"category": "Rent", "monthlyAmount": 15000},
        ])
        user_client.post("/data/budget", json=[{"category": "Travel", "monthlyAmount": 3000}])

        budget = user_client.get("/me").json()["budget"]
        assert [(b["category"], b["monthlyAmount"]) for b in budget] == [("Travel", 3000)]

    def test_empty_budget_clears(self, user_client, sql_repo):
        user_client.post("/data/budget", json=[{"category": "Food", "monthlyAmount": 8000}])
        user_client.post("/data/budget", json=[])
        assert sql_repo.get_budget(user_client.user_id) == []

    def test_goals_are_replaced_and_mirrored(self, user_client, mirror):
        user_client.post("/data/goal", json=[{"name": "Car", "targetAmount": 600000, "targetDate": "2027-01-01"}])
        user_client.post("/data/goal", json=[{"name": "House", "targetAmount": 5000000, "targetDate": "2030-01-01"}])

        goals = user_client.get("/me").json()["goals"]
        assert [g["name"] for g in goals] == ["House"]
        assert [c[0] for c in mirror.calls].count("add_goal_entries") == 2


class TestDebugSession:

    def test_without_session(self, client):
        body = client.get("/debug/session").json()
        assert body["authenticated"] is False

    def test_with_session(self, user_client):
        user_client.post("/data/expense", json=[{"category": "Food", "amount": 10, "date": "2025-01-02"}])
        body = user_client.get("/debug/session").json()
        assert body["authenticated"] is True
        assert body["repositoryType"] == "SqlRepository"
        assert body["data"]["expenseEntries"] == 1
        assert "passwordHash" not in str(body)

    def test_hidden_outside_development(self, sql_repo):
        from fastapi.testclient import TestClient

        from app.core.config import Settings
        from app.main import create_app

        application = create_app(Settings(environment="production"), repository=sql_repo)
        assert TestClient(application).get("/debug/session").status_code == 404
