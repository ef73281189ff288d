"""
Shot Manager：射擊 / 回報循環

    ACTIVE --fire_shot--> AWAITING_REVEAL --reveal_shot_result--> ACTIVE
                                                              +--> GAME_OVER

對戰期間鏈上看不到任何棋盤，所以由防守方自己回報命中或未命中。
不誠實的回報會在公開棋盤時被 FairnessAuditor 抓到

Linus 原則：
- 先檢查所有 guard，再動任何欄位
- 搭配行級鎖、state_version 樂觀鎖和 @transactional，
  同時送出的衝突請求只會有一個成功
"""
from sqlalchemy.orm import Session
import logging

from models import Game, GameEvent, CellStatus
from core.game_manager import GameManager
from core.state_machine import GameStateMachine
from core.exceptions import (
    GameNotReady,
    GameAlreadyOver,
    NotAPlayer,
    InvalidCoordinate,
    ShotAlreadyPending,
    NotYourTurn,
    CellAlreadyShot,
    NoPendingShot,
    NotDefender,
)
from services.board_service import coord_to_index, is_on_board, format_coordinate
from services.state_service import bump_state_version
from database import transactional

logger = logging.getLogger(__name__)


def _require_in_play(game: Game, player: str) -> int:
    """兩種射擊操作共用的 guard，返回呼叫者的位置"""
    if not game.initialized:
        raise GameNotReady(game.id)
    if game.game_over:
        raise GameAlreadyOver(game.id)

    slot = game.slot_of(player)
    if slot == 0:
        raise NotAPlayer(player)
    return slot


class ShotManager:

    @staticmethod
    @transactional
    def fire_shot(db: Session, game_id: str, player: str, x: int, y: int) -> Game:
        """
        射擊對手棋盤上的 (x, y)

        前置條件：
        1. 雙方都已加入，遊戲還沒結束
        2. 呼叫者是這局的玩家
        3. 0 <= x, y < board_size
        4. 沒有等待回報的射擊
        5. 輪到呼叫者
        6. 對手的 (x, y) 還沒被射擊過

        效果：
            pending_shot = (x, y)，pending_shot_by = 呼叫者

        異常：
            GameNotFound, GameNotReady, GameAlreadyOver, NotAPlayer,
            InvalidCoordinate, ShotAlreadyPending, NotYourTurn, CellAlreadyShot,
            ConcurrentModification
        """
        game = GameManager.get_game_for_update(db, game_id)
        slot = _require_in_play(game, player)

        if not is_on_board(x, y, game.board_size):
            raise InvalidCoordinate(x, y, game.board_size)
        if game.pending_shot is not None:
            raise ShotAlreadyPending(
                f"Shot at {game.pending_shot} is already pending resolution"
            )
        if game.turn != slot:
            raise NotYourTurn(player)

        opponent_hits = game.hits_b if slot == 1 else game.hits_a
        if opponent_hits[coord_to_index(x, y, game.board_size)] != CellStatus.UNKNOWN:
            raise CellAlreadyShot(x, y)

        game.pending_shot_x = x
        game.pending_shot_y = y
        game.pending_shot_by = player

        GameStateMachine.sync(db, game)
        bump_state_version(game, reason="shot_fired")
        db.add(GameEvent(
            game_id=game_id,
            event_type="SHOT_FIRED",
            data={"player": player, "slot": slot, "x": x, "y": y}
        ))

        logger.info(f"Game {game_id}: player {slot} fired at {format_coordinate(x, y)}")
        return game

    @staticmethod
    @transactional
    def reveal_shot_result(db: Session, game_id: str, player: str, hit: bool) -> Game:
        """
        防守方回報待處理射擊的結果

        流程：
        1. 確認呼叫者是這發射擊的防守方
        2. 在防守方的命中陣列標記 HIT 或 MISS
        3. 命中時累加防守方被命中的格數
        4. 清除待處理射擊
        5. 艦隊全滅就結束遊戲，否則換邊

        異常：
            GameNotFound, GameNotReady, GameAlreadyOver, NotAPlayer,
            NoPendingShot, NotDefender, ConcurrentModification
        """
        game = GameManager.get_game_for_update(db, game_id)
        slot = _require_in_play(game, player)

        # 1. 防守方檢查
        if game.pending_shot is None:
            raise NoPendingShot("No pending shot to resolve")
        if player == game.pending_shot_by:
            raise NotDefender("Not the defender for this shot")

        x, y = game.pending_shot
        index = coord_to_index(x, y, game.board_size)
        shooter_slot = 2 if slot == 1 else 1

        # 2-3. 記錄結果（複製 list，JSON 欄位才會被標記為 dirty）
        hits = list(game.hits_a if slot == 1 else game.hits_b)
        hits[index] = int(CellStatus.HIT if hit else CellStatus.MISS)

        if slot == 1:
            game.hits_a = hits
            if hit:
                game.hit_count_a += 1
            hit_count = game.hit_count_a
        else:
            game.hits_b = hits
            if hit:
                game.hit_count_b += 1
            hit_count = game.hit_count_b

        # 4. 清除
        game.pending_shot_x = None
        game.pending_shot_y = None
        game.pending_shot_by = None

        # 5. 勝負判定，遊戲結束後 turn 不再變動
        if hit and hit_count >= game.total_ship_squares:
            game.game_over = True
            game.winner = shooter_slot
            logger.info(
                f"Game {game_id}: player {shooter_slot} wins, all {hit_count} ship squares sunk"
            )
        else:
            game.turn = 2 if game.turn == 1 else 1

        GameStateMachine.sync(db, game)
        bump_state_version(game, reason="shot_resolved")
        db.add(GameEvent(
            game_id=game_id,
            event_type="SHOT_RESOLVED",
            data={
                "shooter": shooter_slot,
                "defender": slot,
                "x": x,
                "y": y,
                "hit": bool(hit),
                "hit_count": hit_count,
            }
        ))

        logger.info(
            f"Game {game_id}: {'HIT' if hit else 'MISS'} at {format_coordinate(x, y)} "
            f"on player {slot}"
        )
        return game
