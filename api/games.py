"""
Game API Endpoints

每個 endpoint 都是一個協議操作、一個 transaction。呼叫者身分取自
request body 的 `player` 欄位，錢包簽章在請求到達這個服務之前就已驗證

異常對應：
- GameNotFound            -> 404
- AuthorizationViolation  -> 403
- InputViolation          -> 400
- IntegrityViolation      -> 422 （視為作弊證據）
- State / Capacity        -> 409（含 ConcurrentModification）
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas import (
    GameInitialize,
    GameJoin,
    ShotFire,
    ShotResult,
    BoardReveal,
    GameResponse,
    ShotHistoryEntry,
    GameModeResponse,
)
from core.game_manager import GameManager
from core.shot_manager import ShotManager
from core.fairness_auditor import FairnessAuditor
from core.exceptions import (
    BattleshipProtocolException,
    GameNotFound,
    AuthorizationViolation,
    InputViolation,
    IntegrityViolation,
)
from services.fleet_service import GAME_MODES
from services.history_service import get_shot_history

router = APIRouter(prefix="/api/games", tags=["games"])
logger = logging.getLogger(__name__)


def status_code_for(error: BattleshipProtocolException) -> int:
    if isinstance(error, GameNotFound):
        return 404
    if isinstance(error, AuthorizationViolation):
        return 403
    if isinstance(error, InputViolation):
        return 400
    if isinstance(error, IntegrityViolation):
        return 422
    return 409


def _protocol_error(error: BattleshipProtocolException) -> HTTPException:
    return HTTPException(status_code=status_code_for(error), detail=str(error))


@router.get("/modes", response_model=List[GameModeResponse])
def list_game_modes():
    """可用來建立遊戲的棋盤大小與艦隊"""
    return [
        GameModeResponse(
            name=config.name,
            board_size=config.board_size,
            ship_lengths=list(config.ship_lengths),
            total_ship_squares=config.total_ship_squares
        )
        for config in GAME_MODES.values()
    ]


@router.post("", response_model=GameResponse, status_code=201)
def initialize_game(data: GameInitialize, db: Session = Depends(get_db)):
    """
    建立遊戲，呼叫者成為玩家 A

    沒有 game_id 時建立在呼叫者自己的位置，同一位玩家第二次呼叫會得到 409
    """
    try:
        game = GameManager.initialize_game(
            db,
            data.player,
            bytes.fromhex(data.commitment),
            game_id=data.game_id,
            game_mode=data.game_mode
        )
        return GameResponse.from_game(game)

    except BattleshipProtocolException as e:
        raise _protocol_error(e)
    except Exception as e:
        logger.error(f"Failed to initialize game: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{game_id}/join", response_model=GameResponse)
def join_game(game_id: str, data: GameJoin, db: Session = Depends(get_db)):
    """
    以玩家 B 身分加入等待中的遊戲

    前置條件：
    - 遊戲存在且還沒有人加入
    - 呼叫者不是玩家 A
    """
    try:
        game = GameManager.join_game(db, game_id, data.player, bytes.fromhex(data.commitment))
        return GameResponse.from_game(game)

    except BattleshipProtocolException as e:
        raise _protocol_error(e)
    except Exception as e:
        logger.error(f"Failed to join game: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{game_id}", response_model=GameResponse)
def get_game(game_id: str, db: Session = Depends(get_db)):
    """
    遊戲的一致快照

    Client 輪詢這個 endpoint 並比對 state_version
    """
    try:
        return GameResponse.from_game(GameManager.get_game_by_id(db, game_id))

    except GameNotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except Exception as e:
        logger.error(f"Failed to get game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{game_id}/shots", response_model=GameResponse)
def fire_shot(game_id: str, data: ShotFire, db: Session = Depends(get_db)):
    """射擊對手棋盤的 (x, y)，在防守方回報前射擊保持待處理"""
    try:
        game = ShotManager.fire_shot(db, game_id, data.player, data.x, data.y)
        return GameResponse.from_game(game)

    except BattleshipProtocolException as e:
        raise _protocol_error(e)
    except Exception as e:
        logger.error(f"Failed to fire shot: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{game_id}/shots/result", response_model=GameResponse)
def reveal_shot_result(game_id: str, data: ShotResult, db: Session = Depends(get_db)):
    """回報待處理的射擊（只限防守方）"""
    try:
        game = ShotManager.reveal_shot_result(db, game_id, data.player, data.hit)
        return GameResponse.from_game(game)

    except BattleshipProtocolException as e:
        raise _protocol_error(e)
    except Exception as e:
        logger.error(f"Failed to reveal shot result: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{game_id}/reveal/a", response_model=GameResponse)
def reveal_board_player_a(game_id: str, data: BoardReveal, db: Session = Depends(get_db)):
    """遊戲結束後公開玩家 A 的棋盤與鹽值"""
    try:
        game = FairnessAuditor.reveal_board_player_a(
            db, game_id, data.player, data.board, bytes.fromhex(data.salt)
        )
        return GameResponse.from_game(game)

    except BattleshipProtocolException as e:
        raise _protocol_error(e)
    except Exception as e:
        logger.error(f"Failed to reveal board A: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{game_id}/reveal/b", response_model=GameResponse)
def reveal_board_player_b(game_id: str, data: BoardReveal, db: Session = Depends(get_db)):
    """遊戲結束後公開玩家 B 的棋盤與鹽值"""
    try:
        game = FairnessAuditor.reveal_board_player_b(
            db, game_id, data.player, data.board, bytes.fromhex(data.salt)
        )
        return GameResponse.from_game(game)

    except BattleshipProtocolException as e:
        raise _protocol_error(e)
    except Exception as e:
        logger.error(f"Failed to reveal board B: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{game_id}/history", response_model=List[ShotHistoryEntry])
def get_history(game_id: str, db: Session = Depends(get_db)):
    """依回報順序列出已回報的射擊"""
    try:
        GameManager.get_game_by_id(db, game_id)
        return [ShotHistoryEntry(**entry) for entry in get_shot_history(game_id, db)]

    except GameNotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except Exception as e:
        logger.error(f"Failed to get shot history: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
