"""
射擊歷史 service

從事件日誌依序整理出已回報的射擊，讓 client 可以重播對局，或在公開棋盤後稽核
"""
from typing import List, Dict, Any

from sqlalchemy.orm import Session

from models import GameEvent
from services.board_service import format_coordinate


def get_shot_history(game_id: str, db: Session) -> List[Dict[str, Any]]:
    """
    依回報順序返回所有已回報的射擊

    待回報的射擊還沒有結果，不包含在內
    """
    events = (
        db.query(GameEvent)
        .filter(GameEvent.game_id == game_id, GameEvent.event_type == "SHOT_RESOLVED")
        .order_by(GameEvent.id)
        .all()
    )

    history: List[Dict[str, Any]] = []
    for number, event in enumerate(events, start=1):
        data = event.data
        history.append({
            "shot_number": number,
            "shooter": data["shooter"],
            "defender": data["defender"],
            "x": data["x"],
            "y": data["y"],
            "coordinate": format_coordinate(data["x"], data["y"]),
            "hit": data["hit"],
        })

    return history
