"""HTTP tests for the v1 API against an in-memory store."""

from __future__ import annotations

import inspect
from typing import Iterator

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from src.config import Settings, get_settings
from src.cycle.dates import add_days, today_string
from src.cycle.insights import FALLBACK_INSIGHTS
from src.dependencies import get_store
from src.main import app
from src.models.tracking import CyclePhase
from src.services.storage import InMemoryStore

API = "/api/v1"


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def app_settings() -> Settings:
    return Settings(anthropic_api_key="", allow_demo_seed=False, _env_file=None)


@pytest.fixture
def client(store: InMemoryStore, app_settings: Settings) -> Iterator[TestClient]:
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: app_settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def today() -> str:
    return today_string()


# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["cycle_config"] == "1.0"


# ---------------------------------------------------------------------------
# Logs
# ---------------------------------------------------------------------------


class TestLogRoutes:
    def test_save_new_log(self, client: TestClient, today: str) -> None:
        resp = client.put(
            f"{API}/logs/{today}",
            json={"flow": "Medium", "waterIntake": 8, "symptoms": ["Cramps", "Cramps"]},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["log"]["date"] == today
        assert body["log"]["symptoms"] == ["Cramps"]
        assert body["gamification"]["pointsEarned"] == 275
        assert body["gamification"]["unlockedBadges"] == ["badge_first_log"]
        assert body["gamification"]["levelUp"] is False

    def test_resave_same_day_earns_nothing(self, client: TestClient, today: str) -> None:
        client.put(f"{API}/logs/{today}", json={"mood": "Happy"})
        resp = client.put(f"{API}/logs/{today}", json={"mood": "Sad"})
        assert resp.json()["gamification"]["pointsEarned"] == 0
        assert client.get(f"{API}/logs/{today}").json()["mood"] == "Sad"

    def test_list_and_get(self, client: TestClient, today: str) -> None:
        client.put(f"{API}/logs/{today}", json={"mood": "Calm"})
        resp = client.get(f"{API}/logs")
        assert resp.status_code == 200
        assert [log["date"] for log in resp.json()] == [today]
        assert client.get(f"{API}/logs/2020-01-01").status_code == 404

    def test_bad_date_and_body(self, client: TestClient, today: str) -> None:
        assert client.get(f"{API}/logs/yesterday").status_code == 422
        assert client.put(f"{API}/logs/{today}", json={"flow": "Gushing"}).status_code == 422
        assert client.put(f"{API}/logs/{today}", json={"waterIntake": -1}).status_code == 422

    def test_impossible_date_is_rejected_and_not_stored(self, client: TestClient) -> None:
        resp = client.put(f"{API}/logs/2024-02-30", json={"flow": "Heavy"})
        assert resp.status_code == 422
        assert client.patch(f"{API}/logs/2026-13-45", json={"mood": "Calm"}).status_code == 422
        assert client.get(f"{API}/logs").json() == []
        assert client.get(f"{API}/cycle").status_code == 200

    def test_patch(self, client: TestClient, today: str) -> None:
        client.put(f"{API}/logs/{today}", json={"flow": "Heavy"})

        resp = client.patch(f"{API}/logs/{today}", json={"mood": "Tired"})
        assert resp.status_code == 200
        log = resp.json()["log"]
        assert log["flow"] == "Heavy"
        assert log["mood"] == "Tired"
        assert resp.json()["gamification"]["pointsEarned"] == 0

    def test_patch_errors(self, client: TestClient, today: str) -> None:
        assert client.patch(f"{API}/logs/{today}", json={"mood": "Calm"}).status_code == 404
        client.put(f"{API}/logs/{today}", json={})
        assert client.patch(f"{API}/logs/{today}", json={}).status_code == 400

    def test_delete(self, client: TestClient, today: str) -> None:
        client.put(f"{API}/logs/{today}", json={"mood": "Calm"})
        assert client.delete(f"{API}/logs/{today}").status_code == 204
        assert client.delete(f"{API}/logs/{today}").status_code == 404
        assert client.get(f"{API}/logs").json() == []

    def test_export_csv(self, client: TestClient, today: str) -> None:
        client.put(f"{API}/logs/{today}", json={"flow": "Light", "symptoms": ["Acne", "Bloating"]})
        resp = client.get(f"{API}/logs/export.csv")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert "attachment" in resp.headers["content-disposition"]
        lines = resp.text.split("\n")
        assert lines[0] == "Date,Flow,Spotting,Mood,WaterIntake,Symptoms"
        assert lines[1] == f"{today},Light,,,0,Acne;Bloating"


# ---------------------------------------------------------------------------
# Cycle and analytics
# ---------------------------------------------------------------------------


class TestCycleRoutes:
    def test_empty_store_is_luteal(self, client: TestClient) -> None:
        resp = client.get(f"{API}/cycle")
        assert resp.status_code == 200
        body = resp.json()
        assert body["phase"] == "Luteal"
        assert body["totalCycleLength"] == 28
        assert body["prediction"] == "Expected Today"
        assert body["hasLoggedPeriod"] is False

    def test_period_today(self, client: TestClient, today: str) -> None:
        client.put(f"{API}/logs/{today}", json={"flow": "Heavy"})
        body = client.get(f"{API}/cycle").json()
        assert body["currentDay"] == 1
        assert body["phase"] == "Menstrual"
        assert body["nextPeriodDate"] == add_days(today, 28)
        assert body["isLate"] is False
        assert body["hasLoggedPeriod"] is True

    def test_projections(self, client: TestClient) -> None:
        resp = client.get(f"{API}/cycle/projections", params={"months": 1})
        assert resp.status_code == 200
        types = [p["type"] for p in resp.json()]
        assert types == ["period"] * 5 + ["ovulation"]
        assert len(client.get(f"{API}/cycle/projections").json()) == 18
        assert client.get(f"{API}/cycle/projections", params={"months": 0}).status_code == 422

    def test_analytics(self, client: TestClient) -> None:
        body = client.get(f"{API}/analytics").json()
        assert body["avgCycle"] == 28
        assert body["hasEnoughData"] is False
        assert body["cycleStatus"] == "Regular"
        assert body["flowStats"] == {"light": 0, "medium": 0, "heavy": 0, "score": 0.0}


# ---------------------------------------------------------------------------
# Gamification views
# ---------------------------------------------------------------------------


class TestStatsRoutes:
    def test_default_stats(self, client: TestClient) -> None:
        body = client.get(f"{API}/stats").json()
        assert body["points"] == 100
        assert body["level"] == 1
        assert body["unlockedBadges"] == ["badge_newbie"]

    def test_level_and_reward(self, client: TestClient) -> None:
        level = client.get(f"{API}/stats/level").json()
        assert level["nextLevelPoints"] == 500
        assert level["pointsRemaining"] == 400
        assert level["percentage"] == pytest.approx(20.0)

        reward = client.get(f"{API}/stats/next-reward").json()
        assert reward == {"level": 3, "xp": 1200, "reward": "Forest Fairy"}

    def test_badges(self, client: TestClient, today: str) -> None:
        client.put(f"{API}/logs/{today}", json={"waterIntake": 9})
        badges = {b["id"]: b for b in client.get(f"{API}/stats/badges").json()}
        assert len(badges) == 6
        assert badges["badge_first_log"]["unlocked"] is True
        assert badges["badge_hydration_10"]["current"] == 1
        assert badges["badge_hydration_10"]["target"] == 10
        assert badges["badge_streak_7"]["unlocked"] is False

    def test_weekly(self, client: TestClient, today: str) -> None:
        client.put(f"{API}/logs/{today}", json={})
        week = client.get(f"{API}/stats/weekly").json()
        assert len(week) == 7
        assert week[-1] == {
            "date": today,
            "dayName": week[-1]["dayName"],
            "isLogged": True,
            "isToday": True,
        }


# ---------------------------------------------------------------------------
# Settings and data management
# ---------------------------------------------------------------------------


class TestSettingsRoutes:
    def test_cycle_settings(self, client: TestClient) -> None:
        assert client.get(f"{API}/settings").json()["cycleLength"] == 28

        resp = client.patch(f"{API}/settings/cycle", json={"cycleLength": 31})
        assert resp.status_code == 200
        assert resp.json()["cycleLength"] == 31
        assert client.get(f"{API}/cycle").json()["totalCycleLength"] == 31

        assert client.patch(f"{API}/settings/cycle", json={"cycleLength": 60}).status_code == 422
        assert client.patch(f"{API}/settings/cycle", json={"periodLength": 1}).status_code == 422

    def test_preferences(self, client: TestClient) -> None:
        resp = client.patch(
            f"{API}/settings/preferences", json={"theme": "Forest Fairy", "privacyMode": True}
        )
        body = resp.json()
        assert body["theme"] == "Forest Fairy"
        assert body["privacyMode"] is True
        assert body["cycleLength"] == 28

    def test_reminders(self, client: TestClient) -> None:
        reminders = client.get(f"{API}/settings/reminders").json()
        assert reminders["periodPrediction"]["daysBefore"] == 1

        reminders["pill"] = {"enabled": True, "time": "07:45"}
        assert client.put(f"{API}/settings/reminders", json=reminders).status_code == 200
        assert client.get(f"{API}/settings/reminders").json()["pill"]["time"] == "07:45"

        reminders["pill"]["time"] = "25:00"
        assert client.put(f"{API}/settings/reminders", json=reminders).status_code == 422

    def test_clear_all_data(self, client: TestClient, store: InMemoryStore, today: str) -> None:
        client.put(f"{API}/logs/{today}", json={"flow": "Light"})
        assert client.delete(f"{API}/settings/data").status_code == 204
        assert store.keys() == []
        assert client.get(f"{API}/stats").json()["points"] == 100

    def test_demo_seed_disabled_by_default(self, client: TestClient) -> None:
        assert client.post(f"{API}/settings/demo").status_code == 403

    def test_demo_seed(self, client: TestClient, app_settings: Settings) -> None:
        app_settings.allow_demo_seed = True
        assert client.post(f"{API}/settings/demo").status_code == 204
        assert len(client.get(f"{API}/logs").json()) == 15
        assert client.get(f"{API}/stats").json()["name"] == "Demo User"


# ---------------------------------------------------------------------------
# Insight
# ---------------------------------------------------------------------------


class TestInsightRoute:
    def test_offline_insight(self, client: TestClient) -> None:
        resp = client.get(f"{API}/insight")
        assert resp.status_code == 200
        body = resp.json()
        phase = CyclePhase(body["phase"])
        assert body["insight"] in FALLBACK_INSIGHTS[phase]
        assert body["day"] >= 1


# ---------------------------------------------------------------------------
# Handler dispatch
# ---------------------------------------------------------------------------


class TestHandlerKinds:
    def test_store_backed_handlers_run_in_threadpool(self) -> None:
        # Only the insight and health handlers await anything
        async_paths = {"/health", f"{API}/insight"}
        for route in app.routes:
            if not isinstance(route, APIRoute):
                continue
            is_async = inspect.iscoroutinefunction(route.endpoint)
            assert is_async == (route.path in async_paths), route.path
