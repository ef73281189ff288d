"""
Fleet service：遊戲模式、艦隊形狀驗證、隨機擺放艦隊

純計算，不做狀態轉換

遊戲模式：
- quick:    6x6 棋盤，船 3, 2, 2                  （7 格）
- standard: 10x10 棋盤，船 5, 4, 3, 3, 2          （17 格）
- extended: 12x12 棋盤，船 6, 5, 4, 4, 3, 3, 2, 2 （28 格）
"""
import random
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from core.exceptions import UnknownGameMode


@dataclass(frozen=True)
class GameModeConfig:
    name: str
    board_size: int
    ship_lengths: Tuple[int, ...]

    @property
    def total_ship_squares(self) -> int:
        return sum(self.ship_lengths)

    @property
    def cell_count(self) -> int:
        return self.board_size * self.board_size


GAME_MODES: Dict[str, GameModeConfig] = {
    "quick": GameModeConfig("quick", 6, (3, 2, 2)),
    "standard": GameModeConfig("standard", 10, (5, 4, 3, 3, 2)),
    "extended": GameModeConfig("extended", 12, (6, 5, 4, 4, 3, 3, 2, 2)),
}

STANDARD_MODE = GAME_MODES["standard"]


def get_game_mode(game_mode: str) -> GameModeConfig:
    """
    依名稱查詢遊戲模式

    異常：
        UnknownGameMode: 沒有設定這個名稱
    """
    try:
        return GAME_MODES[game_mode]
    except KeyError:
        raise UnknownGameMode(game_mode)


def is_valid_fleet(board: Sequence[int], config: GameModeConfig) -> bool:
    """
    檢查有船的格子剛好被艦隊鋪滿

    每艘船都是水平或垂直的一直線，船之間不重疊，每個有船的格子都屬於某艘船。
    船可以相鄰，所以用回溯搜尋比對艦隊，而不是找連通區域

    參數：
        board: 攤平的格子，0 = 空，1 = 船
        config: 承諾棋盤時的遊戲模式
    """
    size = config.board_size
    if len(board) != config.cell_count:
        return False

    occupied = {i for i, cell in enumerate(board) if cell == 1}
    if len(occupied) != config.total_ship_squares:
        return False

    return _tile(occupied, Counter(config.ship_lengths), size)


def _tile(remaining: set, lengths: Counter, size: int) -> bool:
    if not remaining:
        return all(count == 0 for count in lengths.values())

    # 剩下最小的 index 一定是某艘船的最上或最左端
    start = min(remaining)
    x, y = start % size, start // size

    for length in sorted(lengths, reverse=True):
        if lengths[length] == 0:
            continue
        for cells in (
            [start + i for i in range(length)] if x + length <= size else None,
            [start + i * size for i in range(length)] if y + length <= size else None,
        ):
            if cells is None or not remaining.issuperset(cells):
                continue
            lengths[length] -= 1
            if _tile(remaining.difference(cells), lengths, size):
                lengths[length] += 1
                return True
            lengths[length] += 1
    return False


def can_place_ship(
    board: List[int],
    x: int,
    y: int,
    length: int,
    horizontal: bool,
    size: int
) -> bool:
    """
    檢查擺放是否出界、重疊或相鄰

    隨機擺放時每艘船周圍保留一格空白（和 client 一樣），協議本身接受相鄰的船
    """
    if horizontal:
        if x + length > size or y >= size:
            return False
    else:
        if x >= size or y + length > size:
            return False

    for i in range(length):
        cx = x + i if horizontal else x
        cy = y if horizontal else y + i
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                ax, ay = cx + dx, cy + dy
                if 0 <= ax < size and 0 <= ay < size and board[ay * size + ax] == 1:
                    return False
    return True


def place_ship(board: List[int], x: int, y: int, length: int, horizontal: bool, size: int) -> None:
    for i in range(length):
        cx = x + i if horizontal else x
        cy = y if horizontal else y + i
        board[cy * size + cx] = 1


def generate_random_fleet(
    config: GameModeConfig = STANDARD_MODE,
    rng: Optional[random.Random] = None,
    max_attempts: int = 1000
) -> List[int]:
    """
    為遊戲模式產生隨機且互不相鄰的艦隊

    參數：
        config: 要產生的遊戲模式
        rng: 亂數來源，傳入固定 seed 的 Random 可重現棋盤
        max_attempts: 每艘船嘗試擺放的次數，超過就整盤重來

    返回：
        攤平的棋盤（0 = 空，1 = 船）
    """
    rng = rng or random.Random()
    size = config.board_size

    while True:
        board = [0] * config.cell_count
        for length in config.ship_lengths:
            for _ in range(max_attempts):
                horizontal = rng.choice([True, False])
                max_x = size - length if horizontal else size - 1
                max_y = size - 1 if horizontal else size - length
                x = rng.randint(0, max_x)
                y = rng.randint(0, max_y)
                if can_place_ship(board, x, y, length, horizontal, size):
                    place_ship(board, x, y, length, horizontal, size)
                    break
            else:
                break
        else:
            return board
