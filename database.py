from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.orm.exc import StaleDataError
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache, wraps
import logging

from core.exceptions import BattleshipProtocolException, ConcurrentModification

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    database_url: str = "sqlite:///./battleship.db"
    default_game_mode: str = "standard"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="BATTLESHIP_")


@lru_cache()
def get_settings():
    return Settings()


settings = get_settings()

# SQLite 連線會在 FastAPI 的 worker threads 之間共用
engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
    pool_pre_ping=True
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """
    FastAPI dependency：每個請求一個 database session

    請求結束後一定會關閉 session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def transactional(func):
    """
    Transaction decorator：每個協議操作都是全有或全無

    使用方式：
        @transactional
        def some_operation(db: Session, ...):
            game = with_game_lock(game_id, db).first()
            game.turn = 2
            bump_state_version(game, reason="...")
            # 不需要手動 commit，decorator 會處理

    如果函式內發生異常：
        - 自動 rollback，不會有欄位只更新一半
        - 協議異常原樣重新拋出（讓 API 層對應狀態碼）
        - StaleDataError（讀取後遊戲被另一個請求修改）轉成 ConcurrentModification

    注意：
        - 第一個參數（或 db 關鍵字參數）必須是 db: Session
        - 不要在函式內手動 commit（decorator 會處理）
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        # 找出 db session（可能在 args 或 kwargs）
        db = None
        if args and isinstance(args[0], Session):
            db = args[0]
        elif 'db' in kwargs:
            db = kwargs['db']

        if db is None:
            raise ValueError(
                f"@transactional requires 'db: Session' as first argument, "
                f"but got args={args}, kwargs={kwargs}"
            )

        try:
            result = func(*args, **kwargs)
            db.commit()
            return result
        except BattleshipProtocolException as e:
            logger.info(f"{func.__name__} rejected: {e}")
            db.rollback()
            raise
        except StaleDataError as e:
            logger.warning(f"{func.__name__} lost a race on a concurrently modified game: {e}")
            db.rollback()
            raise ConcurrentModification(func.__name__) from e
        except Exception as e:
            logger.error(f"Transaction failed in {func.__name__}: {e}", exc_info=True)
            db.rollback()
            raise

    return wrapper
