"""
並發控制工具

兩位玩家可能同時對同一局遊戲送出互相衝突的操作，這裡用兩層機制保證
同一時間只有一個操作能通過 guard：

1. 悲觀鎖：SELECT ... FOR UPDATE（PostgreSQL 等支援行級鎖的資料庫）
2. 樂觀鎖：Game.state_version 是 SQLAlchemy 的 version_id_col，
   UPDATE 會帶上 WHERE state_version = 讀取時的版本，
   讀取後被別人改過就會拋出 StaleDataError（@transactional 轉成 ConcurrentModification）

SQLite 會忽略 FOR UPDATE，pysqlite 的 SELECT 也不在 transaction 內，
所以在 SQLite 上只靠第 2 層
"""
from sqlalchemy.orm import Session, Query

from models import Game


def with_game_lock(game_id: str, db: Session) -> Query:
    """
    鎖定一局 Game（行級鎖）

    範例：
        game = with_game_lock(game_id, db).first()
        if not game:
            raise GameNotFound(game_id)
        game.turn = 2
        bump_state_version(game, reason="...")
        db.commit()

    參數：
        game_id: Game 的 ID
        db: SQLAlchemy Session

    返回：
        Query object（需要呼叫 .first() 或 .one() 來取得結果）

    注意：
        - nowait=False 表示如果鎖被佔用，會等待
        - 必須在 transaction 內使用（見 @transactional）
        - 修改後一定要 bump_state_version，否則樂觀鎖不會生效
    """
    return db.query(Game).filter(
        Game.id == game_id
    ).with_for_update(nowait=False)
