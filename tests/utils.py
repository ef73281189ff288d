from core.fairness_auditor import FairnessAuditor
from core.game_manager import GameManager
from core.shot_manager import ShotManager
from services.commitment_service import compute_commitment

PLAYER_A = "alice-wallet"
PLAYER_B = "bob-wallet"

SHIPS_A = [
    [0, 1, 2, 3, 4],
    [10, 11, 12, 13],
    [20, 21, 22],
    [30, 31, 32],
    [40, 41],
]
SHIPS_B = [
    [5, 6, 7, 8, 9],
    [15, 16, 17, 18],
    [25, 26, 27],
    [35, 36, 37],
    [45, 46],
]

SALT_A = bytes(range(32))
SALT_B = bytes(range(100, 132))


def make_board(ships, size=10):
    board = [0] * (size * size)
    for ship in ships:
        for index in ship:
            board[index] = 1
    return board


BOARD_A = make_board(SHIPS_A)
BOARD_B = make_board(SHIPS_B)
COMMITMENT_A = compute_commitment(BOARD_A, SALT_A)
COMMITMENT_B = compute_commitment(BOARD_B, SALT_B)

# Every cell of B's fleet as (x, y), starting with (5, 0)
SHOTS_SINKING_B = [(i % 10, i // 10) for ship in SHIPS_B for i in ship]


def start_game(db, game_id="game-1"):
    GameManager.initialize_game(db, PLAYER_A, COMMITMENT_A, game_id=game_id)
    return GameManager.join_game(db, game_id, PLAYER_B, COMMITMENT_B)


def play_shot(db, game_id, shooter, defender, x, y, defender_board, lie=False):
    """Fire and let the defender answer from its real board (or lie about it)."""
    ShotManager.fire_shot(db, game_id, shooter, x, y)
    hit = defender_board[y * 10 + x] == 1
    return ShotManager.reveal_shot_result(db, game_id, defender, hit != lie)


def play_until_a_wins(db, game_id="game-1", miss_cells_for_b=None):
    """
    A sinks B's fleet while B fires at cells from miss_cells_for_b (or at
    A's empty bottom rows). Returns the finished game.
    """
    b_targets = list(miss_cells_for_b or [(x, y) for y in range(5, 10) for x in range(10)])
    game = None
    for i, (x, y) in enumerate(SHOTS_SINKING_B):
        game = play_shot(db, game_id, PLAYER_A, PLAYER_B, x, y, BOARD_B)
        if game.game_over:
            break
        bx, by = b_targets[i]
        game = play_shot(db, game_id, PLAYER_B, PLAYER_A, bx, by, BOARD_A)
    return game


def reveal_both(db, game_id="game-1"):
    FairnessAuditor.reveal_board_player_a(db, game_id, PLAYER_A, BOARD_A, SALT_A)
    return FairnessAuditor.reveal_board_player_b(db, game_id, PLAYER_B, BOARD_B, SALT_B)
