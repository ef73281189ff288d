"""
Game Manager：管理一局遊戲紀錄的生命週期

職責：
1. 建立遊戲（玩家 A + 棋盤承諾）
2. 加入遊戲（玩家 B + 棋盤承諾）
3. 查詢遊戲

射擊交給 ShotManager，棋盤公開交給 FairnessAuditor
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Optional
import logging

from models import Game, GameEvent, GameStatus
from core.state_machine import GameStateMachine
from core.locks import with_game_lock
from core.exceptions import (
    GameNotFound,
    AlreadyExists,
    GameFull,
    SelfJoin,
)
from services.board_service import empty_hits
from services.commitment_service import ensure_commitment
from services.fleet_service import get_game_mode
from services.naming_service import derive_game_id
from services.state_service import bump_state_version
from database import transactional, get_settings

logger = logging.getLogger(__name__)


class GameManager:
    """遊戲紀錄生命週期管理器"""

    @staticmethod
    @transactional
    def initialize_game(
        db: Session,
        player: str,
        commitment: bytes,
        game_id: Optional[str] = None,
        game_mode: Optional[str] = None
    ) -> Game:
        """
        建立新遊戲，呼叫者成為玩家 A

        流程：
        1. 驗證承諾、決定遊戲模式
        2. 確認位置沒有被佔用
        3. 建立 Game（WAITING、turn 1、空的命中陣列）
        4. 記錄事件

        參數：
            db: SQLAlchemy Session
            player: 呼叫者身分，成為玩家 A
            commitment: 32 bytes 的 SHA-256(board || salt)
            game_id: 要建立的位置，預設是呼叫者自己的位置
            game_mode: quick / standard / extended，預設取 settings

        返回：
            新的 Game

        異常：
            MalformedCommitment: 承諾不是 32 bytes
            UnknownGameMode: 沒有設定這個遊戲模式
            AlreadyExists: 位置已經有遊戲
        """
        # 1. 輸入
        commitment = ensure_commitment(commitment)
        config = get_game_mode(game_mode or get_settings().default_game_mode)
        game_id = game_id or derive_game_id(player)

        # 2. 位置必須是空的
        if db.query(Game).filter(Game.id == game_id).first():
            raise AlreadyExists(game_id)

        # 3. 建立紀錄
        game = Game(
            id=game_id,
            game_mode=config.name,
            board_size=config.board_size,
            total_ship_squares=config.total_ship_squares,
            player_a=player,
            commitment_a=commitment,
            status=GameStatus.WAITING,
            turn=1,
            hits_a=empty_hits(config.board_size),
            hits_b=empty_hits(config.board_size),
            hit_count_a=0,
            hit_count_b=0,
            initialized=False,
            game_over=False,
            winner=0,
            revealed_a=False,
            revealed_b=False,
            state_version=0,
        )
        bump_state_version(game, reason="game_initialized")
        db.add(game)
        try:
            db.flush()
        except IntegrityError:
            # 同一個位置被別人搶先建立
            raise AlreadyExists(game_id)

        # 4. 事件
        db.add(GameEvent(
            game_id=game_id,
            event_type="GAME_INITIALIZED",
            data={"player": player, "game_mode": config.name}
        ))

        logger.info(f"New {config.name} game {game_id} initialized by {player}")
        return game

    @staticmethod
    @transactional
    def join_game(db: Session, game_id: str, player: str, commitment: bytes) -> Game:
        """
        以玩家 B 身分加入等待中的遊戲（WAITING -> ACTIVE）

        前置條件：
        1. 遊戲存在
        2. 還沒有人加入
        3. 呼叫者不是玩家 A

        異常：
            GameNotFound: 遊戲不存在
            MalformedCommitment: 承諾不是 32 bytes
            GameFull: 玩家 B 已經存在
            SelfJoin: 呼叫者是玩家 A
        """
        commitment = ensure_commitment(commitment)

        game = GameManager.get_game_for_update(db, game_id)

        if game.player_b is not None or game.initialized:
            raise GameFull(game_id)
        if player == game.player_a:
            raise SelfJoin("Cannot play against yourself")

        game.player_b = player
        game.commitment_b = commitment
        game.initialized = True
        game.turn = 1

        GameStateMachine.sync(db, game)
        bump_state_version(game, reason="player_joined")
        db.add(GameEvent(
            game_id=game_id,
            event_type="PLAYER_JOINED",
            data={"player": player}
        ))

        logger.info(f"Player {player} joined game {game_id}, game is now active")
        return game

    @staticmethod
    def get_game_by_id(db: Session, game_id: str) -> Game:
        """
        查詢遊戲（不鎖定）

        異常：
            GameNotFound: 遊戲不存在
        """
        game = db.query(Game).filter(Game.id == game_id).first()
        if not game:
            raise GameNotFound(game_id)
        return game

    @staticmethod
    def get_game_for_update(db: Session, game_id: str) -> Game:
        """
        查詢並鎖定遊戲，供目前的 transaction 修改

        異常：
            GameNotFound: 遊戲不存在
        """
        game = with_game_lock(game_id, db).first()
        if not game:
            raise GameNotFound(game_id)
        return game
