"""
Board service：座標、命中陣列與公開棋盤檢查

純計算，不做狀態轉換。棋盤與命中陣列逐列攤平，
所以格子 (x, y) 的 index 是 y * board_size + x
"""
from typing import List, Sequence, Tuple

from models import CellStatus
from core.exceptions import MalformedBoard


def coord_to_index(x: int, y: int, board_size: int) -> int:
    """
    把 (x, y) 轉成攤平後的 index

    範例：
        coord_to_index(5, 0, 10) -> 5
        coord_to_index(6, 2, 10) -> 26
    """
    return y * board_size + x


def index_to_coord(index: int, board_size: int) -> Tuple[int, int]:
    return index % board_size, index // board_size


def is_on_board(x: int, y: int, board_size: int) -> bool:
    return 0 <= x < board_size and 0 <= y < board_size


def format_coordinate(x: int, y: int) -> str:
    """人類可讀的座標：欄位字母加上從 1 開始的列號（例如 F1）"""
    return f"{chr(ord('A') + x)}{y + 1}"


def empty_hits(board_size: int) -> List[int]:
    return [int(CellStatus.UNKNOWN)] * (board_size * board_size)


def validate_board(board: Sequence[int], board_size: int) -> List[int]:
    """
    檢查公開的棋盤每一格都是 0/1

    返回：
        轉成 int list 的棋盤

    異常：
        MalformedBoard: 長度錯誤或有格子不是 0 或 1
    """
    expected = board_size * board_size
    if len(board) != expected:
        raise MalformedBoard(
            f"Board must have {expected} cells, got {len(board)}"
        )
    cells = [int(cell) for cell in board]
    if any(cell not in (0, 1) for cell in cells):
        raise MalformedBoard("Board cells must be 0 (empty) or 1 (ship)")
    return cells


def find_inconsistent_cells(hits: Sequence[int], board: Sequence[int]) -> List[int]:
    """
    比對對戰中的回報與公開的棋盤

    回報 HIT 的格子必須有船，回報 MISS 的格子必須是空的，
    沒被射擊過的格子不檢查

    返回：
        所有矛盾格子的 index，棋盤誠實時為空 list
    """
    inconsistent = []
    for index, status in enumerate(hits):
        if status == CellStatus.HIT and board[index] != 1:
            inconsistent.append(index)
        elif status == CellStatus.MISS and board[index] != 0:
            inconsistent.append(index)
    return inconsistent
