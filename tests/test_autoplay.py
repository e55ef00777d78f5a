import unittest
from unittest.mock import AsyncMock

from fakes import FakeTransport, SleepRecorder, ai_seat, chat_payload, fenced

from neurochess.errors import TransportError
from neurochess.game import GameSession
from neurochess.models import SessionStatus
from neurochess.move_request import MoveRequestPipeline


def ai_vs_ai(transport, hook=None, retries=3):
    sleep = SleepRecorder(hook)
    session = GameSession(
        pipeline=MoveRequestPipeline(transport=transport, sleep=SleepRecorder()),
        white=ai_seat(max_retries=retries),
        black=ai_seat(max_retries=retries),
        autoplay_delay_s=0.25,
        sleep=sleep,
    )
    return session, sleep


class AutoPlayTests(unittest.IsolatedAsyncioTestCase):
    async def test_plays_until_checkmate(self):
        transport = FakeTransport(*(chat_payload(fenced(m)) for m in ("f2f3", "e7e5", "g2g4", "d8h4")))
        session, sleep = ai_vs_ai(transport)
        session.start_new_game()
        self.assertTrue(session.toggle_auto_play())
        await session.autoplay.task
        self.assertEqual([m.uci for m in session.move_history], ["f2f3", "e7e5", "g2g4", "d8h4"])
        self.assertEqual(session.status, SessionStatus.black_wins)
        self.assertFalse(session.auto_play)
        self.assertEqual(len(transport.requests), 4)
        self.assertEqual(sleep.delays, [0.25] * 4)

    async def test_stop_during_delay_prevents_next_request(self):
        transport = FakeTransport(chat_payload(fenced("e2e4")), chat_payload(fenced("e7e5")))
        session, _ = ai_vs_ai(transport)
        session.autoplay._sleep = SleepRecorder(session.stop_auto_play)
        session.start_new_game()
        session.toggle_auto_play()
        await session.autoplay.task
        self.assertEqual(len(transport.requests), 1)
        self.assertEqual(len(session.move_history), 1)
        self.assertFalse(session.auto_play)
        self.assertEqual(session.status, SessionStatus.active)

    async def test_toggle_off_stops_loop(self):
        transport = FakeTransport(chat_payload(fenced("e2e4")), chat_payload(fenced("e7e5")))
        session, _ = ai_vs_ai(transport)
        session.autoplay._sleep = SleepRecorder(session.toggle_auto_play)
        session.start_new_game()
        self.assertTrue(session.toggle_auto_play())
        await session.autoplay.task
        self.assertEqual(len(session.move_history), 1)
        self.assertFalse(session.auto_play)

    async def test_reset_during_delay_ends_loop(self):
        transport = FakeTransport(chat_payload(fenced("e2e4")), chat_payload(fenced("e7e5")))
        session, _ = ai_vs_ai(transport)
        session.autoplay._sleep = SleepRecorder(session.reset_game)
        session.start_new_game()
        session.toggle_auto_play()
        await session.autoplay.task
        self.assertEqual(len(transport.requests), 1)
        self.assertEqual(session.status, SessionStatus.idle)
        self.assertEqual(session.move_history, [])
        self.assertFalse(session.auto_play)

    async def test_failure_turns_auto_play_off(self):
        transport = FakeTransport(TransportError("connection refused"))
        session, sleep = ai_vs_ai(transport, retries=1)
        session.start_new_game()
        session.toggle_auto_play()
        await session.autoplay.task
        self.assertFalse(session.auto_play)
        self.assertEqual(session.status, SessionStatus.active)
        self.assertEqual(session.status_message, "AI Error: connection refused")
        self.assertEqual(sleep.delays, [])

    async def test_unexpected_error_still_turns_auto_play_off(self):
        transport = FakeTransport(chat_payload(fenced("e2e4")))
        session, _ = ai_vs_ai(transport)
        session.pipeline.acquire_move = AsyncMock(side_effect=AttributeError("no attribute get"))
        session.start_new_game()
        self.assertTrue(session.toggle_auto_play())
        with self.assertLogs("autoplay", level="ERROR"):
            await session.autoplay.task
        self.assertFalse(session.auto_play)
        self.assertFalse(session.autoplay.running)
        self.assertFalse(session.is_awaiting_ai)
        self.assertEqual(session.status_message, "AI Error: no attribute get")

    async def test_malformed_replies_exhaust_and_stop(self):
        transport = FakeTransport({"candidates": [{"content": ["x"]}]})
        session, _ = ai_vs_ai(transport, retries=2)
        session.seats = {seat: ai_seat(provider_id="google", model_id="gemini-2.0-flash", max_retries=2) for seat in session.seats}
        session.start_new_game()
        session.toggle_auto_play()
        await session.autoplay.task
        self.assertFalse(session.auto_play)
        self.assertEqual(len(transport.requests), 2)
        self.assertTrue(session.status_message.startswith("AI Error: Google API Error"))

    async def test_toggle_requires_active_game(self):
        session, _ = ai_vs_ai(FakeTransport(chat_payload(fenced("e2e4"))))
        self.assertFalse(session.toggle_auto_play())
        self.assertFalse(session.auto_play)
        self.assertIsNone(session.autoplay.task)

    async def test_start_reuses_live_loop(self):
        transport = FakeTransport(chat_payload(fenced("e2e4")))
        session, _ = ai_vs_ai(transport)
        session.autoplay._sleep = SleepRecorder(session.stop_auto_play)
        session.start_new_game()
        session.toggle_auto_play()
        first = session.autoplay.task
        self.assertIs(session.autoplay.start(), first)
        await first
        self.assertFalse(session.autoplay.running)


if __name__ == "__main__":
    unittest.main()
