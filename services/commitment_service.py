"""
Commitment service：開局前把玩家綁定到一個棋盤配置

commitment = SHA-256(board_bytes || salt)

- board_bytes: 每格一個 byte，0 = 空，1 = 船
- salt: client 自己產生的 32 bytes 隨機值，公開前必須保密

Client 弄丟鹽值就永遠無法證明自己公平，協議不代管鹽值
"""
import hashlib
import secrets
from typing import Sequence

from core.exceptions import MalformedCommitment, MalformedSalt

COMMITMENT_LENGTH = 32
SALT_LENGTH = 32


def generate_salt() -> bytes:
    return secrets.token_bytes(SALT_LENGTH)


def encode_board(board: Sequence[int]) -> bytes:
    return bytes(board)


def compute_commitment(board: Sequence[int], salt: bytes) -> bytes:
    """
    把棋盤和鹽值雜湊成 32 bytes 的承諾

    異常：
        MalformedSalt: 鹽值不是 32 bytes
    """
    ensure_salt(salt)
    return hashlib.sha256(encode_board(board) + bytes(salt)).digest()


def verify_commitment(board: Sequence[int], salt: bytes, commitment: bytes) -> bool:
    """用常數時間比較重新計算的雜湊與儲存的承諾"""
    return secrets.compare_digest(compute_commitment(board, salt), bytes(commitment))


def ensure_commitment(commitment: bytes) -> bytes:
    if len(commitment) != COMMITMENT_LENGTH:
        raise MalformedCommitment(
            f"Commitment must be {COMMITMENT_LENGTH} bytes, got {len(commitment)}"
        )
    return bytes(commitment)


def ensure_salt(salt: bytes) -> bytes:
    if len(salt) != SALT_LENGTH:
        raise MalformedSalt(f"Salt must be {SALT_LENGTH} bytes, got {len(salt)}")
    return bytes(salt)
