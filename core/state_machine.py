"""
遊戲狀態機

WAITING -> ACTIVE -> AWAITING_REVEAL -> ACTIVE -> ... -> GAME_OVER -> VERIFIED

狀態由紀錄本身的欄位推導（initialized、pending shot、game_over、公開旗標），
再同步到 Game.status。每個 Manager 修改遊戲後都會呼叫 GameStateMachine.sync()，
所以不合法的欄位組合永遠不會被 commit
"""
from sqlalchemy.orm import Session
import logging

from models import Game, GameEvent, GameStatus
from core.exceptions import InvalidStateTransition

logger = logging.getLogger(__name__)


class GameStateMachine:
    ALLOWED_TRANSITIONS = {
        GameStatus.WAITING: {GameStatus.ACTIVE},
        GameStatus.ACTIVE: {GameStatus.AWAITING_REVEAL},
        GameStatus.AWAITING_REVEAL: {GameStatus.ACTIVE, GameStatus.GAME_OVER},
        GameStatus.GAME_OVER: {GameStatus.VERIFIED},
        GameStatus.VERIFIED: set(),
    }

    @staticmethod
    def derive_status(game: Game) -> GameStatus:
        if not game.initialized:
            return GameStatus.WAITING
        if game.game_over:
            if game.revealed_a and game.revealed_b:
                return GameStatus.VERIFIED
            return GameStatus.GAME_OVER
        if game.pending_shot is not None:
            return GameStatus.AWAITING_REVEAL
        return GameStatus.ACTIVE

    @staticmethod
    def can_transition(current: GameStatus, target: GameStatus) -> bool:
        return target in GameStateMachine.ALLOWED_TRANSITIONS[current]

    @staticmethod
    def sync(db: Session, game: Game) -> GameStatus:
        """
        把 Game.status 移到欄位所推導出的狀態

        狀態有變化時記錄 GAME_STATE_CHANGED 事件

        異常：
            InvalidStateTransition: 欄位推導出的狀態無法從目前狀態到達
        """
        current = game.status
        target = GameStateMachine.derive_status(game)
        if current == target:
            return current

        if not GameStateMachine.can_transition(current, target):
            raise InvalidStateTransition(
                f"Cannot transition game {game.id} from {current.value} to {target.value}"
            )

        game.status = target
        db.add(GameEvent(
            game_id=game.id,
            event_type="GAME_STATE_CHANGED",
            data={"from": current.value, "to": target.value}
        ))
        logger.info(f"Game {game.id}: {current.value} -> {target.value}")
        return target
