import json
import os
import tempfile
import unittest

from app import app as flask_app  # noqa: E402
from app import state_to_json, tile_to_json  # noqa: E402
import app as app_mod             # noqa: E402
from game import GameConfig, GameController, Tile  # noqa: E402

# Seven types, one triple each, flat so every tile is clickable; no replenishment.
FLAT7 = GameConfig(tile_types=tuple("abcdefg"), sets_per_type=1, layers=((1, 21),), replenish_low_water=0)


class TestFlaskAPI(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self._orig_db = app_mod.LEADERBOARD_DB
        app_mod.LEADERBOARD_DB = os.path.join(self._tmp.name, "leaderboard.db")
        self._orig_max_sessions = app_mod.MAX_SESSIONS
        self.client = flask_app.test_client()

    def tearDown(self):
        app_mod.LEADERBOARD_DB = self._orig_db
        app_mod.MAX_SESSIONS = self._orig_max_sessions
        app_mod._SESSIONS.clear()
        self._tmp.cleanup()

    def _post(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type="application/json")

    def _ids_of(self, state, tile_type):
        return [t["id"] for t in state["tiles"] if t["type"] == tile_type and not t["hidden"]]

    def test_given_new_game_when_posted_then_returns_session_and_full_board(self):
        r = self._post("/api/new", {"mode": "normal", "seed": 123})
        self.assertEqual(r.status_code, 200)
        data = r.get_json()
        self.assertTrue(data["ok"])
        self.assertIsInstance(data["session"], str)
        state = data["state"]
        self.assertEqual(state["phase"], "playing")
        self.assertEqual(state["mode"], "normal")
        self.assertEqual(len(state["tiles"]), 126)
        self.assertEqual(state["collection"], [])
        self.assertEqual(state["capacity"], 7)
        self.assertEqual(set(state["tiles"][0]), {"id", "type", "x", "y", "layer", "hidden"})

    def test_given_session_when_clicking_free_and_hidden_tiles_then_collected_or_ignored(self):
        d = self._post("/api/new", {"mode": "normal", "seed": 7}).get_json()
        sid, state = d["session"], d["state"]
        hidden = next(t for t in state["tiles"] if t["hidden"])
        free = next(t for t in state["tiles"] if not t["hidden"])

        r1 = self._post("/api/click", {"session": sid, "tileId": hidden["id"]})
        self.assertEqual(r1.status_code, 200)
        self.assertEqual(r1.get_json()["result"], "ignored")

        r2 = self._post("/api/click", {"session": sid, "tileId": free["id"]})
        d2 = r2.get_json()
        self.assertEqual(d2["result"], "collected")
        self.assertEqual(len(d2["state"]["tiles"]), 125)
        self.assertEqual(d2["state"]["collection"], [{"id": free["id"], "type": free["type"]}])

        r3 = self._post("/api/state", {"session": sid})
        self.assertEqual(r3.get_json()["state"], d2["state"])

    def test_given_bad_requests_then_400_or_404(self):
        self.assertEqual(self._post("/api/new", {"mode": "zen"}).status_code, 400)
        self.assertEqual(self._post("/api/click", {"session": "nope", "tileId": "tile-0"}).status_code, 404)
        self.assertEqual(self._post("/api/click", {"session": "nope"}).status_code, 400)
        self.assertEqual(self._post("/api/state", {}).status_code, 404)
        self.assertEqual(self._post("/api/menu", {"session": "nope"}).status_code, 404)
        self.assertEqual(self._post("/api/login", {"name": "  "}).status_code, 400)
        self.assertEqual(self._post("/api/new", {"seed": [1, 2]}).status_code, 400)
        self.assertEqual(self._post("/api/new", {"seed": {"a": 1}}).status_code, 400)
        self.assertEqual(self._post("/api/new", {"seed": True}).status_code, 400)
        self.assertEqual(app_mod._SESSIONS, {})

    def test_given_session_cap_when_many_games_started_then_oldest_idle_sessions_evicted(self):
        app_mod.MAX_SESSIONS = 5
        sids = [self._post("/api/new", {"seed": i}).get_json()["session"] for i in range(12)]
        self.assertEqual(len(app_mod._SESSIONS), 5)
        self.assertEqual(list(app_mod._SESSIONS), sids[-5:])
        self.assertEqual(self._post("/api/state", {"session": sids[0]}).status_code, 404)

        # Touching a session makes it the most recently used one
        self.assertEqual(self._post("/api/state", {"session": sids[7]}).status_code, 200)
        self._post("/api/login", {"name": "late"})
        self.assertEqual(len(app_mod._SESSIONS), 5)
        self.assertIn(sids[7], app_mod._SESSIONS)
        self.assertNotIn(sids[8], app_mod._SESSIONS)

    def test_given_string_seed_when_new_game_then_same_deal_as_same_string(self):
        a = self._post("/api/new", {"seed": "daily"}).get_json()["state"]["tiles"]
        b = self._post("/api/new", {"seed": "daily"}).get_json()["state"]["tiles"]
        self.assertEqual(a, b)

    def test_given_playing_when_menu_posted_then_menu_phase_and_clicks_ignored(self):
        d = self._post("/api/new", {"seed": 1}).get_json()
        sid = d["session"]
        r = self._post("/api/menu", {"session": sid})
        self.assertEqual(r.get_json()["state"]["phase"], "menu")
        tid = d["state"]["tiles"][-1]["id"]
        self.assertEqual(self._post("/api/click", {"session": sid, "tileId": tid}).get_json()["result"], "ignored")

    def test_given_login_then_player_kept_across_new_games_until_logout(self):
        r = self._post("/api/login", {"name": "Kittymi"})
        sid = r.get_json()["session"]
        self.assertEqual(r.get_json()["state"]["player"], "Kittymi")
        d = self._post("/api/new", {"session": sid, "mode": "endless"}).get_json()
        self.assertEqual(d["session"], sid)
        self.assertEqual(d["state"]["player"], "Kittymi")
        out = self._post("/api/logout", {"session": sid}).get_json()["state"]
        self.assertIsNone(out["player"])
        self.assertEqual(out["phase"], "menu")

    def _play_endless_to_overflow(self, sid):
        state = self._post("/api/new", {"session": sid, "mode": "endless", "seed": 2}).get_json()["state"]
        for tid in self._ids_of(state, "a"):
            state = self._post("/api/click", {"session": sid, "tileId": tid}).get_json()["state"]
        for tile_type in "bcd":
            for tid in self._ids_of(state, tile_type)[:2]:
                state = self._post("/api/click", {"session": sid, "tileId": tid}).get_json()["state"]
        return self._post("/api/click", {"session": sid, "tileId": self._ids_of(state, "e")[0]}).get_json()

    def test_given_endless_game_lost_by_logged_in_player_then_score_submitted(self):
        sid = self._post("/api/login", {"name": "咩咩"}).get_json()["session"]
        controller = GameController(FLAT7)
        controller.login("咩咩")
        app_mod._SESSIONS[sid] = controller

        d = self._play_endless_to_overflow(sid)
        self.assertEqual(d["result"], "overflow")
        self.assertEqual(d["state"]["phase"], "lose")
        self.assertEqual(d["state"]["score"], 100)

        board = self.client.get("/api/leaderboard").get_json()
        self.assertIn({"name": "咩咩", "score": 100}, [{"name": e["name"], "score": e["score"]} for e in board])

    def test_given_broken_store_when_game_ends_then_game_state_unaffected(self):
        app_mod.LEADERBOARD_DB = self._tmp.name  # a directory: every write fails
        sid = self._post("/api/login", {"name": "p"}).get_json()["session"]
        controller = GameController(FLAT7)
        controller.login("p")
        app_mod._SESSIONS[sid] = controller

        d = self._play_endless_to_overflow(sid)
        self.assertTrue(d["ok"])
        self.assertEqual(d["state"]["phase"], "lose")

        board = self.client.get("/api/leaderboard")
        self.assertEqual(board.status_code, 200)
        self.assertEqual(board.get_json(), [{"name": "connection failed", "score": 0, "timestamp": ""}])

        r = self._post("/api/leaderboard", {"name": "p", "score": 5})
        self.assertEqual(r.status_code, 500)

    def test_given_leaderboard_when_fetched_and_posted_then_top_list_returned(self):
        r = self.client.get("/api/leaderboard")
        self.assertEqual(r.status_code, 200)
        self.assertEqual([e["score"] for e in r.get_json()], [99999, 88888, 77777, 66666])

        r2 = self._post("/api/leaderboard", {"name": "newbie", "score": 70000})
        self.assertEqual(r2.status_code, 200)
        self.assertEqual([e["name"] for e in r2.get_json()][3], "newbie")

        self.assertEqual(self._post("/api/leaderboard", {"name": "x"}).status_code, 400)
        self.assertEqual(self._post("/api/leaderboard", {"name": "", "score": 3}).status_code, 400)
        self.assertEqual(self._post("/api/leaderboard", {"name": "x", "score": "3"}).status_code, 400)

    def test_given_tile_and_controller_when_serialised_then_json_shapes(self):
        t = Tile(id="tile-1", type="3", x=10, y=20.5, layer=2, hidden=True)
        self.assertEqual(tile_to_json(t), {"id": "tile-1", "type": "3", "x": 10.0, "y": 20.5, "layer": 2, "hidden": True})
        c = GameController(FLAT7, rng=0)
        sj = state_to_json(c)
        self.assertEqual(sj["phase"], "menu")
        self.assertEqual(sj["tiles"], [])


if __name__ == "__main__":
    unittest.main(verbosity=2)
