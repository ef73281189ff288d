"""
資料庫模型

Game 是一局對戰的權威紀錄，GameEvent 是它只增不改的事件日誌
"""
from enum import Enum, IntEnum
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    JSON,
    LargeBinary,
    String,
    func,
)

from database import Base


class CellStatus(IntEnum):
    """命中陣列（被射擊紀錄）中一格的狀態"""
    UNKNOWN = 0
    MISS = 1
    HIT = 2


class GameStatus(str, Enum):
    WAITING = "WAITING"                  # 只有玩家 A 加入
    ACTIVE = "ACTIVE"                    # 輪到的玩家可以射擊
    AWAITING_REVEAL = "AWAITING_REVEAL"  # 防守方必須回報待處理的射擊
    GAME_OVER = "GAME_OVER"              # 已有艦隊全滅，棋盤尚未全部公開
    VERIFIED = "VERIFIED"                # 雙方棋盤都已公開並驗證


class Game(Base):
    __tablename__ = "games"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))

    game_mode = Column(String(16), nullable=False, default="standard")
    board_size = Column(Integer, nullable=False, default=10)
    total_ship_squares = Column(Integer, nullable=False, default=17)

    player_a = Column(String(64), nullable=False)
    player_b = Column(String(64), nullable=True)
    commitment_a = Column(LargeBinary(32), nullable=False)
    commitment_b = Column(LargeBinary(32), nullable=True)

    status = Column(SAEnum(GameStatus), nullable=False, default=GameStatus.WAITING)
    turn = Column(Integer, nullable=False, default=1)

    # 各玩家被射擊的紀錄，見 CellStatus
    hits_a = Column(JSON, nullable=False)
    hits_b = Column(JSON, nullable=False)
    hit_count_a = Column(Integer, nullable=False, default=0)
    hit_count_b = Column(Integer, nullable=False, default=0)

    initialized = Column(Boolean, nullable=False, default=False)
    game_over = Column(Boolean, nullable=False, default=False)
    winner = Column(Integer, nullable=False, default=0)  # 0 = 無，1 = A，2 = B

    pending_shot_x = Column(Integer, nullable=True)
    pending_shot_y = Column(Integer, nullable=True)
    pending_shot_by = Column(String(64), nullable=True)

    revealed_a = Column(Boolean, nullable=False, default=False)
    revealed_b = Column(Boolean, nullable=False, default=False)
    revealed_board_a = Column(JSON, nullable=True)
    revealed_board_b = Column(JSON, nullable=True)

    state_version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # 樂觀鎖：UPDATE 帶 WHERE state_version = 讀取時的版本，由 bump_state_version 遞增
    __mapper_args__ = {
        "version_id_col": state_version,
        "version_id_generator": False,
    }

    @property
    def pending_shot(self):
        if self.pending_shot_x is None:
            return None
        return (self.pending_shot_x, self.pending_shot_y)

    def slot_of(self, player: str) -> int:
        """玩家 A 回傳 1，玩家 B 回傳 2，其他人回傳 0"""
        if player == self.player_a:
            return 1
        if self.player_b is not None and player == self.player_b:
            return 2
        return 0

    def player_in_slot(self, slot: int):
        return self.player_a if slot == 1 else self.player_b


class GameEvent(Base):
    __tablename__ = "game_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    event_type = Column(String(32), nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
