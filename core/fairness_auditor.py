"""
Fairness Auditor：賽後公開棋盤

遊戲結束後，雙方公開承諾背後的棋盤和鹽值。三項檢查全部通過才接受：

1. SHA-256(board || salt) 等於儲存的承諾
2. 對戰中回報的每一個 HIT / MISS 都和棋盤一致
3. 有船的格子剛好組成這個遊戲模式的艦隊

只檢查承諾不夠：玩家可以承諾一個誠實的棋盤，卻在個別射擊上說謊，
只有第 2 項抓得到。雙方都公開後遊戲進入 VERIFIED，宣告的勝方才可信
"""
from sqlalchemy.orm import Session
from typing import Sequence
import logging

from models import Game, GameEvent
from core.game_manager import GameManager
from core.state_machine import GameStateMachine
from core.exceptions import (
    GameNotOver,
    NotPlayerA,
    NotPlayerB,
    AlreadyRevealed,
    CommitmentMismatch,
    InconsistentReveal,
    InvalidFleetConfiguration,
)
from services.board_service import validate_board, find_inconsistent_cells
from services.commitment_service import ensure_salt, verify_commitment
from services.fleet_service import get_game_mode, is_valid_fleet
from services.state_service import bump_state_version
from database import transactional

logger = logging.getLogger(__name__)


class FairnessAuditor:

    @staticmethod
    @transactional
    def reveal_board_player_a(
        db: Session, game_id: str, player: str, board: Sequence[int], salt: bytes
    ) -> Game:
        """公開玩家 A 的棋盤，見 FairnessAuditor.reveal_board"""
        return FairnessAuditor.reveal_board(db, game_id, player, board, salt, slot=1)

    @staticmethod
    @transactional
    def reveal_board_player_b(
        db: Session, game_id: str, player: str, board: Sequence[int], salt: bytes
    ) -> Game:
        """公開玩家 B 的棋盤，見 FairnessAuditor.reveal_board"""
        return FairnessAuditor.reveal_board(db, game_id, player, board, salt, slot=2)

    @staticmethod
    def reveal_board(
        db: Session,
        game_id: str,
        player: str,
        board: Sequence[int],
        salt: bytes,
        slot: int
    ) -> Game:
        """
        驗證並記錄一位玩家的棋盤

        必須在 transaction 內執行，公開的入口是
        reveal_board_player_a / reveal_board_player_b

        前置條件：
        1. 遊戲已結束
        2. 呼叫者是 `slot` 的玩家
        3. 該棋盤還沒公開過
        4. board 有 board_size^2 格 0/1，salt 是 32 bytes

        異常：
            GameNotFound, GameNotOver, NotPlayerA, NotPlayerB, AlreadyRevealed,
            MalformedBoard, MalformedSalt,
            CommitmentMismatch, InconsistentReveal, InvalidFleetConfiguration,
            ConcurrentModification
        """
        game = GameManager.get_game_for_update(db, game_id)

        # 1-3. 狀態與呼叫者
        if not game.game_over:
            raise GameNotOver(game_id)
        if player != game.player_in_slot(slot):
            if slot == 1:
                raise NotPlayerA(f"{player} is not player A of game {game_id}")
            raise NotPlayerB(f"{player} is not player B of game {game_id}")
        already_revealed = game.revealed_a if slot == 1 else game.revealed_b
        if already_revealed:
            raise AlreadyRevealed(f"Player {slot} board already revealed")

        # 4. 格式
        cells = validate_board(board, game.board_size)
        salt = ensure_salt(salt)

        commitment = game.commitment_a if slot == 1 else game.commitment_b
        hits = game.hits_a if slot == 1 else game.hits_b

        # 檢查 1：承諾
        if not verify_commitment(cells, salt, commitment):
            logger.warning(
                f"Game {game_id}: player {slot} revealed a board that does not match the commitment"
            )
            raise CommitmentMismatch("Commitment hash does not match revealed data")

        # 檢查 2：對戰中的回報
        inconsistent = find_inconsistent_cells(hits, cells)
        if inconsistent:
            logger.warning(
                f"Game {game_id}: player {slot} answered {len(inconsistent)} shots dishonestly"
            )
            raise InconsistentReveal(inconsistent)

        # 檢查 3：艦隊形狀
        config = get_game_mode(game.game_mode)
        if not is_valid_fleet(cells, config):
            logger.warning(f"Game {game_id}: player {slot} revealed an invalid fleet")
            raise InvalidFleetConfiguration(
                f"Invalid fleet configuration - must be ships of lengths "
                f"{list(config.ship_lengths)} ({config.total_ship_squares} squares)"
            )

        if slot == 1:
            game.revealed_a = True
            game.revealed_board_a = cells
        else:
            game.revealed_b = True
            game.revealed_board_b = cells

        GameStateMachine.sync(db, game)
        bump_state_version(game, reason="board_revealed")
        db.add(GameEvent(
            game_id=game_id,
            event_type="BOARD_REVEALED",
            data={"player": player, "slot": slot}
        ))

        logger.info(f"Game {game_id}: player {slot} board revealed and verified")
        return game
