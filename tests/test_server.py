import time
import unittest

from fakes import FakeTransport, SleepRecorder, ai_seat, chat_payload, fenced, human_seat

from neurochess.game import GameSession
from neurochess.move_request import MoveRequestPipeline
from neurochess.server import SessionLoop, create_app


class ServerTests(unittest.TestCase):
    def setUp(self):
        self.transport = FakeTransport(chat_payload(fenced("e2e4", "Center")))
        self.session = GameSession(
            pipeline=MoveRequestPipeline(transport=self.transport, sleep=SleepRecorder()),
            white=human_seat(),
            black=human_seat(),
            sleep=SleepRecorder(),
        )
        self.runner = SessionLoop()
        self.client = create_app(self.session, self.runner).test_client()

    def tearDown(self):
        self.runner.stop()

    def wait_for(self, predicate, timeout=5.0):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            state = self.client.get("/api/game").get_json()
            if predicate(state):
                return state
            time.sleep(0.02)
        self.fail("condition not reached")

    def test_providers(self):
        rsp = self.client.get("/api/providers")
        self.assertEqual(rsp.status_code, 200)
        ids = [p["id"] for p in rsp.get_json()]
        self.assertEqual(ids, ["openrouter", "openai", "anthropic", "google", "xai"])
        self.assertEqual(rsp.headers["Access-Control-Allow-Origin"], "*")

    def test_human_game_flow(self):
        state = self.client.post("/api/game/new").get_json()
        self.assertEqual(state["status"], "active")

        rsp = self.client.post("/api/game/move", json={"move": "e2e4"})
        self.assertEqual(rsp.status_code, 200)
        self.assertEqual(rsp.get_json()["history_text"], "1. e4")

        rsp = self.client.post("/api/game/move", json={"move": "e2e4"})
        self.assertEqual(rsp.status_code, 400)
        self.assertEqual(rsp.get_json()["error"], "move_rejected")
        self.assertEqual(self.client.post("/api/game/move", json={}).status_code, 400)
        rsp = self.client.post("/api/game/move", json={"move": "e7e7"})
        self.assertEqual(rsp.status_code, 400)
        self.assertEqual(rsp.get_json()["error"], "move_rejected")

        pgn = self.client.get("/api/game/pgn")
        self.assertEqual(pgn.mimetype, "application/x-chess-pgn")
        self.assertIn("1. e4", pgn.get_data(as_text=True))

        state = self.client.post("/api/game/reset").get_json()
        self.assertEqual(state["status"], "idle")
        self.assertEqual(state["move_history"], [])

    def test_seat_configuration(self):
        self.assertEqual(self.client.put("/api/seats/purple", json={}).status_code, 404)
        rsp = self.client.put("/api/seats/black", json={"provider_id": "nope"})
        self.assertEqual(rsp.status_code, 400)
        rsp = self.client.put("/api/seats/black", json={"kind": "ai", "provider_id": "xai", "api_key": "secret-key"})
        self.assertEqual(rsp.status_code, 200)
        seat = rsp.get_json()["seats"]["black"]
        self.assertEqual(seat["kind"], "ai")
        self.assertTrue(seat["has_api_key"])
        self.assertNotIn("secret-key", rsp.get_data(as_text=True))

        self.client.post("/api/game/new")
        rsp = self.client.put("/api/seats/black", json={"kind": "human"})
        self.assertEqual(rsp.status_code, 409)

    def test_ai_move_runs_in_background(self):
        self.client.put("/api/seats/white", json={"kind": "ai", "api_key": "test-key"})
        self.client.post("/api/game/new")
        self.client.post("/api/debug", json={"enabled": True})
        rsp = self.client.post("/api/game/ai-move")
        self.assertEqual(rsp.status_code, 202)
        state = self.wait_for(lambda s: len(s["move_history"]) == 1)
        self.assertEqual(state["move_history"][0]["uci"], "e2e4")
        self.assertFalse(state["is_awaiting_ai"])

        debug = self.client.get("/api/debug").get_json()
        self.assertTrue(debug["enabled"])
        self.assertIn("AI played: e4 (e2e4)\nReason: Center", [e["text"] for e in debug["entries"]])
        cleared = self.client.delete("/api/debug").get_json()
        self.assertEqual(cleared["entries"], [])

    def test_autoplay_requires_active_game(self):
        state = self.client.post("/api/game/autoplay", json={"enabled": True}).get_json()
        self.assertFalse(state["auto_play"])


if __name__ == "__main__":
    unittest.main()
