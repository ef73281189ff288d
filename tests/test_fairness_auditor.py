"""
Tests for post-game board reveals and the full match scenario.
"""

import pytest

from core.exceptions import (
    AlreadyRevealed,
    CommitmentMismatch,
    GameNotOver,
    InconsistentReveal,
    IntegrityViolation,
    InvalidFleetConfiguration,
    MalformedBoard,
    MalformedSalt,
    NotPlayerA,
    NotPlayerB,
)
from core.fairness_auditor import FairnessAuditor
from core.game_manager import GameManager
from core.shot_manager import ShotManager
from models import GameStatus
from services.commitment_service import compute_commitment
from tests.utils import (
    BOARD_A,
    BOARD_B,
    COMMITMENT_B,
    PLAYER_A,
    PLAYER_B,
    SALT_A,
    SALT_B,
    SHOTS_SINKING_B,
    make_board,
    play_shot,
    play_until_a_wins,
    reveal_both,
    start_game,
)


# A's empty cells in rows 5-8, never (9, 9)
EMPTY_ROWS_OF_A = [(x, y) for y in range(5, 9) for x in range(10)]


@pytest.fixture
def finished_game(db):
    start_game(db)
    return play_until_a_wins(db)


class TestRevealGuards:

    def test_reveal_before_game_over(self, db):
        start_game(db)
        with pytest.raises(GameNotOver):
            FairnessAuditor.reveal_board_player_a(db, "game-1", PLAYER_A, BOARD_A, SALT_A)

    def test_wrong_slot(self, db, finished_game):
        with pytest.raises(NotPlayerA):
            FairnessAuditor.reveal_board_player_a(db, "game-1", PLAYER_B, BOARD_B, SALT_B)
        with pytest.raises(NotPlayerB):
            FairnessAuditor.reveal_board_player_b(db, "game-1", PLAYER_A, BOARD_A, SALT_A)

    def test_already_revealed(self, db, finished_game):
        FairnessAuditor.reveal_board_player_a(db, "game-1", PLAYER_A, BOARD_A, SALT_A)
        with pytest.raises(AlreadyRevealed):
            FairnessAuditor.reveal_board_player_a(db, "game-1", PLAYER_A, BOARD_A, SALT_A)

    def test_malformed_board(self, db, finished_game):
        with pytest.raises(MalformedBoard):
            FairnessAuditor.reveal_board_player_a(db, "game-1", PLAYER_A, BOARD_A[:50], SALT_A)

    def test_malformed_salt(self, db, finished_game):
        with pytest.raises(MalformedSalt):
            FairnessAuditor.reveal_board_player_a(db, "game-1", PLAYER_A, BOARD_A, SALT_A[:16])


class TestCommitmentIntegrity:

    def test_wrong_salt(self, db, finished_game):
        with pytest.raises(CommitmentMismatch):
            FairnessAuditor.reveal_board_player_a(db, "game-1", PLAYER_A, BOARD_A, SALT_B)

        game = GameManager.get_game_by_id(db, "game-1")
        assert game.revealed_a is False
        assert game.revealed_board_a is None

    def test_other_valid_fleet(self, db, finished_game):
        """A perfectly valid fleet that was not committed is still rejected."""
        moved = make_board([
            [0, 1, 2, 3, 4],
            [10, 11, 12, 13],
            [20, 21, 22],
            [30, 31, 32],
            [42, 43],
        ])
        with pytest.raises(CommitmentMismatch):
            FairnessAuditor.reveal_board_player_a(db, "game-1", PLAYER_A, moved, SALT_A)

    def test_integrity_errors_share_a_kind(self, db, finished_game):
        with pytest.raises(IntegrityViolation):
            FairnessAuditor.reveal_board_player_b(db, "game-1", PLAYER_B, BOARD_A, SALT_B)


class TestRevealConsistency:

    def test_lie_about_a_hit(self, db):
        """B claims a miss on a ship cell; the honest commitment does not save B."""
        start_game(db)
        play_shot(db, "game-1", PLAYER_A, PLAYER_B, 5, 0, BOARD_B, lie=True)
        play_shot(db, "game-1", PLAYER_B, PLAYER_A, 9, 9, BOARD_A)
        for i, (x, y) in enumerate(SHOTS_SINKING_B[1:]):
            play_shot(db, "game-1", PLAYER_A, PLAYER_B, x, y, BOARD_B)
            play_shot(db, "game-1", PLAYER_B, PLAYER_A, *EMPTY_ROWS_OF_A[i], BOARD_A)

        # B lied once, so only 16 hits so far; one more ship cell is needed
        game = GameManager.get_game_by_id(db, "game-1")
        assert game.game_over is False
        assert game.hit_count_b == 16

        # A fires at B's empty cell and B lies again, ending the game
        play_shot(db, "game-1", PLAYER_A, PLAYER_B, 0, 9, BOARD_B, lie=True)
        game = GameManager.get_game_by_id(db, "game-1")
        assert game.game_over is True
        assert game.winner == 1

        with pytest.raises(InconsistentReveal) as exc_info:
            FairnessAuditor.reveal_board_player_b(db, "game-1", PLAYER_B, BOARD_B, SALT_B)
        assert exc_info.value.cells == [5, 90]

        # A's board is still verifiable on its own
        game = FairnessAuditor.reveal_board_player_a(db, "game-1", PLAYER_A, BOARD_A, SALT_A)
        assert game.revealed_a is True
        assert game.revealed_b is False
        assert game.status == GameStatus.GAME_OVER

    def test_first_revealer_is_cross_checked(self, db):
        """Consistency is checked even when the opponent has not revealed yet."""
        start_game(db)
        play_shot(db, "game-1", PLAYER_A, PLAYER_B, 5, 0, BOARD_B)
        # A lies: B's shot at (0, 0) is a hit on A's carrier
        play_shot(db, "game-1", PLAYER_B, PLAYER_A, 0, 0, BOARD_A, lie=True)
        for i, (x, y) in enumerate(SHOTS_SINKING_B[1:]):
            game = play_shot(db, "game-1", PLAYER_A, PLAYER_B, x, y, BOARD_B)
            if game.game_over:
                break
            play_shot(db, "game-1", PLAYER_B, PLAYER_A, *EMPTY_ROWS_OF_A[i], BOARD_A)

        with pytest.raises(InconsistentReveal):
            FairnessAuditor.reveal_board_player_a(db, "game-1", PLAYER_A, BOARD_A, SALT_A)


class TestFleetShape:

    def test_committed_invalid_fleet_is_rejected(self, db):
        """An 18-square board can be committed, but never verified."""
        bad_board = list(BOARD_A)
        bad_board[50] = 1
        bad_commitment = compute_commitment(bad_board, SALT_A)

        GameManager.initialize_game(db, PLAYER_A, bad_commitment, game_id="game-1")
        GameManager.join_game(db, "game-1", PLAYER_B, COMMITMENT_B)
        # B never fires at (0, 5), the extra square
        play_until_a_wins(db, miss_cells_for_b=[(x, y) for y in range(6, 10) for x in range(10)])

        with pytest.raises(InvalidFleetConfiguration):
            FairnessAuditor.reveal_board_player_a(db, "game-1", PLAYER_A, bad_board, SALT_A)


class TestEndToEnd:

    def test_full_match(self, db):
        game = start_game(db)
        assert game.turn == 1

        ShotManager.fire_shot(db, "game-1", PLAYER_A, 5, 0)
        game = ShotManager.reveal_shot_result(db, "game-1", PLAYER_B, BOARD_B[5] == 1)
        assert game.hit_count_b == 1
        assert game.turn == 2

        b_targets = [(x, y) for y in range(5, 10) for x in range(10)]
        play_shot(db, "game-1", PLAYER_B, PLAYER_A, *b_targets[0], BOARD_A)
        for i, (x, y) in enumerate(SHOTS_SINKING_B[1:], start=1):
            game = play_shot(db, "game-1", PLAYER_A, PLAYER_B, x, y, BOARD_B)
            if game.game_over:
                break
            play_shot(db, "game-1", PLAYER_B, PLAYER_A, *b_targets[i], BOARD_A)

        assert game.game_over is True
        assert game.winner == 1
        assert game.hit_count_b == 17

        game = FairnessAuditor.reveal_board_player_a(db, "game-1", PLAYER_A, BOARD_A, SALT_A)
        assert game.revealed_a is True
        assert game.status == GameStatus.GAME_OVER

        game = FairnessAuditor.reveal_board_player_b(db, "game-1", PLAYER_B, BOARD_B, SALT_B)
        assert game.revealed_a is True
        assert game.revealed_b is True
        assert game.status == GameStatus.VERIFIED
        assert game.revealed_board_a == BOARD_A
        assert game.revealed_board_b == BOARD_B

    def test_reveal_order_does_not_matter(self, db, finished_game):
        FairnessAuditor.reveal_board_player_b(db, "game-1", PLAYER_B, BOARD_B, SALT_B)
        game = FairnessAuditor.reveal_board_player_a(db, "game-1", PLAYER_A, BOARD_A, SALT_A)
        assert game.status == GameStatus.VERIFIED

    def test_verified_game_is_final(self, db, finished_game):
        reveal_both(db)
        with pytest.raises(AlreadyRevealed):
            FairnessAuditor.reveal_board_player_b(db, "game-1", PLAYER_B, BOARD_B, SALT_B)
        assert GameManager.get_game_by_id(db, "game-1").status == GameStatus.VERIFIED
