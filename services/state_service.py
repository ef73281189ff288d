"""
State version 追蹤

Client 短輪詢 GET /api/games/{id}，比對 state_version 就知道上次讀取後
有沒有變化

state_version 同時是 Game 的樂觀鎖版本欄位（見 models.Game.__mapper_args__），
所以每個修改遊戲的操作都必須呼叫一次 bump_state_version
"""
import logging

from models import Game

logger = logging.getLogger(__name__)


def bump_state_version(game: Game, reason: str) -> int:
    game.state_version = (game.state_version or 0) + 1
    logger.debug(f"Game {game.id} state_version={game.state_version} ({reason})")
    return game.state_version
