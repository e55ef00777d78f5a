import unittest

import chess

from neurochess.errors import IllegalMoveError
from neurochess.models import Seat
from neurochess.referee import Referee

STALEMATE_FEN = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
BARE_KINGS_FEN = "8/8/8/4k3/8/8/8/4K3 w - - 0 1"


def play(referee, *tokens, position=None):
    position = position or referee.new_position()
    for token in tokens:
        position = referee.apply_move(position, token).position
    return position


class RefereeTests(unittest.TestCase):
    def setUp(self):
        self.ref = Referee()

    def test_starting_position_has_twenty_legal_tokens(self):
        tokens = self.ref.legal_move_tokens(self.ref.new_position())
        self.assertEqual(len(tokens), 20)
        self.assertIn("e2e4", tokens)
        self.assertIn("g1f3", tokens)

    def test_apply_move_returns_new_position(self):
        start = self.ref.new_position()
        applied = self.ref.apply_move(start, "E2E4")
        self.assertEqual(applied.san, "e4")
        self.assertEqual(applied.uci, "e2e4")
        self.assertEqual(start.fen(), chess.STARTING_FEN)
        self.assertEqual(applied.position.piece_at(chess.E4), chess.Piece(chess.PAWN, chess.WHITE))

    def test_illegal_and_malformed_tokens(self):
        start = self.ref.new_position()
        self.assertFalse(self.ref.is_legal(start, "e2e5"))
        self.assertFalse(self.ref.is_legal(start, "castle"))
        with self.assertRaises(IllegalMoveError):
            self.ref.apply_move(start, "e2e5")

    def test_same_square_token_is_illegal(self):
        start = self.ref.new_position()
        self.assertFalse(self.ref.is_legal(start, "e2e2"))
        with self.assertRaises(IllegalMoveError):
            self.ref.apply_move(start, "E2E2")

    def test_checkmate_terminal_status(self):
        mated = play(self.ref, "f2f3", "e7e5", "g2g4", "d8h4")
        status = self.ref.terminal_status(mated)
        self.assertTrue(status.is_over)
        self.assertIs(status.winner, Seat.black)
        self.assertEqual(status.reason, chess.Termination.CHECKMATE)
        self.assertEqual(status.result, "0-1")
        self.assertEqual(self.ref.describe(mated), "Checkmate! Black wins!")

    def test_draw_terminal_statuses(self):
        stalemate = self.ref.new_position(STALEMATE_FEN)
        self.assertIsNone(self.ref.terminal_status(stalemate).winner)
        self.assertEqual(self.ref.describe(stalemate), "Stalemate! Game is a draw.")
        bare = self.ref.new_position(BARE_KINGS_FEN)
        self.assertEqual(self.ref.terminal_status(bare).result, "1/2-1/2")
        self.assertEqual(self.ref.describe(bare), "Draw by insufficient material.")

    def test_describe_ongoing_positions(self):
        self.assertEqual(self.ref.describe(self.ref.new_position()), "White to move")
        checked = play(self.ref, "e2e4", "f7f6", "d1h5")
        self.assertEqual(self.ref.describe(checked), "Black is in check!")
        self.assertFalse(self.ref.terminal_status(checked).is_over)

    def test_material_balance_after_capture(self):
        position = play(self.ref, "e2e4", "d7d5", "e4d5")
        balance = self.ref.material_balance(position)
        self.assertEqual(balance["white_total"], 39)
        self.assertEqual(balance["black_total"], 38)
        self.assertEqual(balance["advantage"], "white")
        self.assertEqual(balance["advantage_value"], 1)
        self.assertEqual(balance["black"]["pawns"], 7)

    def test_export_pgn_result_markers(self):
        ongoing = play(self.ref, "e2e4")
        pgn = self.ref.export_pgn(ongoing, "Human", "AI (gpt-4o)", date="2024.01.01")
        self.assertIn('[White "Human"]', pgn)
        self.assertIn('[Black "AI (gpt-4o)"]', pgn)
        self.assertIn('[Result "*"]', pgn)

        mated = play(self.ref, "f2f3", "e7e5", "g2g4", "d8h4")
        pgn = self.ref.export_pgn(mated, "Human", "Human")
        self.assertIn('[Result "0-1"]', pgn)
        self.assertTrue(pgn.strip().endswith("0-1"))
        self.assertNotIn("*", pgn)


if __name__ == "__main__":
    unittest.main()
