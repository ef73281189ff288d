"""
Naming service：遊戲 ID

純計算，不做狀態轉換
"""
from uuid import NAMESPACE_URL, uuid5

GAME_NAMESPACE = uuid5(NAMESPACE_URL, "battleship-protocol/games")


def derive_game_id(player: str) -> str:
    """
    建立者的預設遊戲位置

    每位玩家固定得到同一個位置，所以重複建立會得到 AlreadyExists。
    想同時開多局的呼叫者請自己傳入 game_id

    範例：
        derive_game_id("alice") == derive_game_id("alice")
    """
    return str(uuid5(GAME_NAMESPACE, f"game:{player}"))
