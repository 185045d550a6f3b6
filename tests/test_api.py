"""End-to-end tests for the HTTP API."""

import random

import pytest
from fastapi.testclient import TestClient

from pokernight.main import PokerNightServer, create_app


@pytest.fixture
def client(database_url):
    server = PokerNightServer(
        database_url=database_url,
        admin_password="secret",
        redis_url="",
        rng=random.Random(3)
    )
    with TestClient(create_app(server)) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(client):
    response = client.post("/api/admin/login", json={"password": "secret"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


def start_game(client, players=("A", "B", "C"), buy_in=50):
    response = client.post("/api/generate", json={"players": list(players), "buyIn": buy_in})
    assert response.status_code == 200
    return response.json()


class TestGameFlow:
    def test_healthz(self, client):
        assert client.get("/healthz").json() == {"status": "ok"}

    def test_no_active_game(self, client):
        response = client.get("/api/active-game")
        assert response.status_code == 200
        assert response.json() is None

    def test_generate_then_record_results(self, client):
        game = start_game(client)
        assert sorted(game["seating"]) == ["A", "B", "C"]

        active = client.get("/api/active-game").json()
        assert active == {"id": game["gameId"], "seating": game["seating"], "buyIn": 50}

        response = client.post("/api/results", json={"gameId": game["gameId"], "first": "B"})
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get("/api/active-game").json() is None

        stats = {row["player"]: row for row in client.get("/api/stats").json()}
        assert stats["B"] == {
            "player": "B", "gamesPlayed": 1, "wins": 1, "top3": 1,
            "buyins": 50, "winnings": 150, "netProfit": 100,
            "winRate": 100, "top3Rate": 100,
        }
        assert stats["A"]["netProfit"] == -50
        assert client.get("/api/stats").json()[0]["player"] == "B"

    def test_legacy_winner_endpoint(self, client):
        game = start_game(client, buy_in=0)
        response = client.post("/api/winner", json={"gameId": game["gameId"], "winner": "C"})
        assert response.status_code == 200

        stats = {row["player"]: row for row in client.get("/api/stats").json()}
        assert stats["C"]["wins"] == 1
        assert stats["C"]["winnings"] == 0

    def test_generate_without_buy_in(self, client):
        response = client.post("/api/generate", json={"players": ["A", "B"]})
        assert response.status_code == 200
        assert client.get("/api/active-game").json()["buyIn"] == 0

    def test_history(self, client):
        game = start_game(client)
        client.post("/api/results", json={"gameId": game["gameId"], "first": "A", "second": "C"})
        second = start_game(client, players=("D", "E"), buy_in=0)

        history = client.get("/api/history").json()
        assert [entry["id"] for entry in history] == [second["gameId"], game["gameId"]]
        assert history[0]["placements"] == {"first": None, "second": None, "third": None}
        assert history[1]["seating"] == game["seating"]
        assert history[1]["placements"] == {"first": "A", "second": "C", "third": None}
        assert history[1]["buyIn"] == 50
        assert history[1]["payouts"] == {"first": 150, "second": 0, "third": 0, "totalPot": 150}
        assert history[1]["createdAt"]


class TestGameErrors:
    @pytest.mark.parametrize("players", [None, "A,B", [], ["A"], ["A", "A"], ["A", " "], ["A", 3]])
    def test_invalid_roster(self, client, players):
        response = client.post("/api/generate", json={"players": players})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid players list"}

    def test_negative_buy_in(self, client):
        response = client.post("/api/generate", json={"players": ["A", "B"], "buyIn": -5})
        assert response.status_code == 400
        assert "error" in response.json()

    def test_second_game_while_active(self, client):
        start_game(client)
        response = client.post("/api/generate", json={"players": ["D", "E"]})
        assert response.status_code == 409
        assert "in progress" in response.json()["error"]

    def test_exhausted_seatings(self, client):
        for winner in ("A", "B"):
            game = start_game(client, players=("A", "B"), buy_in=0)
            client.post("/api/results", json={"gameId": game["gameId"], "first": winner})

        response = client.post("/api/generate", json={"players": ["A", "B"]})
        assert response.status_code == 409
        assert "50 attempts" in response.json()["error"]

    def test_results_for_unknown_game(self, client):
        response = client.post("/api/results", json={"gameId": 999, "first": "A"})
        assert response.status_code == 404
        assert response.json() == {"error": "Game not found"}

    def test_results_missing_game_id(self, client):
        response = client.post("/api/results", json={"first": "A"})
        assert response.status_code == 400

    def test_results_for_unseated_player(self, client):
        game = start_game(client)
        response = client.post("/api/results", json={"gameId": game["gameId"], "first": "Z"})
        assert response.status_code == 400
        assert client.get("/api/active-game").json()["id"] == game["gameId"]

    def test_results_recorded_twice(self, client):
        game = start_game(client)
        client.post("/api/results", json={"gameId": game["gameId"], "first": "A"})
        response = client.post("/api/results", json={"gameId": game["gameId"], "first": "B"})
        assert response.status_code == 409

    def test_busy_write_lock(self, client):
        class TimedOutLock:
            async def acquire(self):
                return False

        class BusyRedis:
            def lock(self, name, timeout=None, blocking_timeout=None):
                return TimedOutLock()

        write_lock = client.app.state.server.write_lock
        write_lock.redis_client = BusyRedis()
        try:
            response = client.post("/api/generate", json={"players": ["A", "B"]})
        finally:
            write_lock.redis_client = None

        assert response.status_code == 503
        assert "busy" in response.json()["error"]
        assert client.get("/api/active-game").json() is None


class TestPayouts:
    def test_winner_takes_all(self, client):
        response = client.get("/api/payouts", params={"players": 4, "buyIn": 25})
        assert response.json() == {"first": 100, "second": 0, "third": 0, "totalPot": 100}

    def test_free_game(self, client):
        response = client.get("/api/payouts", params={"players": 4})
        assert response.json()["totalPot"] == 0

    def test_negative_input(self, client):
        response = client.get("/api/payouts", params={"players": -1, "buyIn": 5})
        assert response.status_code == 400


class TestAdmin:
    def test_login_with_wrong_password(self, client):
        response = client.post("/api/admin/login", json={"password": "wrong"})
        assert response.status_code == 401
        assert "error" in response.json()

    def test_verify(self, client, admin_headers):
        assert client.get("/api/admin/verify", headers=admin_headers).json() == {"valid": True}

    def test_routes_require_token(self, client):
        game = start_game(client)
        assert client.get("/api/admin/verify").status_code == 401
        assert client.delete(f"/api/admin/game/{game['gameId']}").status_code == 401
        assert client.patch(f"/api/admin/game/{game['gameId']}", json={"first": "A"}).status_code == 401
        response = client.post("/api/admin/recompute", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_logout_revokes_token(self, client, admin_headers):
        assert client.post("/api/admin/logout", headers=admin_headers).status_code == 200
        assert client.get("/api/admin/verify", headers=admin_headers).status_code == 401

    def test_delete_game_rebuilds_stats(self, client, admin_headers):
        game = start_game(client)
        client.post("/api/results", json={"gameId": game["gameId"], "first": "B"})

        response = client.delete(f"/api/admin/game/{game['gameId']}", headers=admin_headers)
        assert response.status_code == 200
        assert client.get("/api/stats").json() == []
        assert client.get("/api/history").json() == []

    def test_delete_unknown_game(self, client, admin_headers):
        response = client.delete("/api/admin/game/999", headers=admin_headers)
        assert response.status_code == 404

    def test_patch_placements(self, client, admin_headers):
        game = start_game(client)
        client.post("/api/results", json={"gameId": game["gameId"], "first": "B"})

        response = client.patch(
            f"/api/admin/game/{game['gameId']}",
            json={"first": "A", "second": "B"},
            headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["placements"] == {"first": "A", "second": "B", "third": None}

        stats = {row["player"]: row for row in client.get("/api/stats").json()}
        assert (stats["A"]["wins"], stats["A"]["netProfit"]) == (1, 100)
        assert (stats["B"]["wins"], stats["B"]["top3"], stats["B"]["netProfit"]) == (0, 1, -50)

    def test_patch_with_winner_field(self, client, admin_headers):
        game = start_game(client)
        client.post("/api/results", json={"gameId": game["gameId"], "first": "B", "second": "A"})

        response = client.patch(
            f"/api/admin/game/{game['gameId']}",
            json={"winner": "C"},
            headers=admin_headers
        )
        assert response.json()["placements"] == {"first": "C", "second": "A", "third": None}

    def test_patch_invalid_placement(self, client, admin_headers):
        game = start_game(client)
        client.post("/api/results", json={"gameId": game["gameId"], "first": "B"})

        response = client.patch(
            f"/api/admin/game/{game['gameId']}",
            json={"first": "Z"},
            headers=admin_headers
        )
        assert response.status_code == 400

    def test_patch_second_place_on_active_game(self, client, admin_headers):
        game = start_game(client)

        response = client.patch(
            f"/api/admin/game/{game['gameId']}",
            json={"second": "B"},
            headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Missing winner"}
        assert client.get("/api/active-game").json()["id"] == game["gameId"]

    def test_recompute(self, client, admin_headers):
        game = start_game(client)
        client.post("/api/results", json={"gameId": game["gameId"], "first": "B"})
        before = client.get("/api/stats").json()

        response = client.post("/api/admin/recompute", headers=admin_headers)
        assert response.json() == {"success": True, "players": 3}
        assert client.get("/api/stats").json() == before
