"""
API request / response schemas

承諾與鹽值以 64 字元的 hex 字串傳遞，棋盤是攤平的 0/1 list
"""
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from models import Game, GameStatus


def _hex32(value: str) -> str:
    value = value.strip().lower()
    if value.startswith("0x"):
        value = value[2:]
    if len(value) != 64:
        raise ValueError("must be 32 bytes as 64 hex characters")
    try:
        bytes.fromhex(value)
    except ValueError:
        raise ValueError("must be a hex string")
    return value


class GameInitialize(BaseModel):
    player: str = Field(..., min_length=1, max_length=64)
    commitment: str
    game_id: Optional[str] = Field(None, min_length=1, max_length=36)
    game_mode: Optional[str] = None

    @field_validator("commitment")
    @classmethod
    def check_commitment(cls, v):
        return _hex32(v)


class GameJoin(BaseModel):
    player: str = Field(..., min_length=1, max_length=64)
    commitment: str

    @field_validator("commitment")
    @classmethod
    def check_commitment(cls, v):
        return _hex32(v)


class ShotFire(BaseModel):
    player: str
    x: int
    y: int


class ShotResult(BaseModel):
    player: str
    hit: bool


class BoardReveal(BaseModel):
    player: str
    board: List[int]
    salt: str

    @field_validator("salt")
    @classmethod
    def check_salt(cls, v):
        return _hex32(v)


class ActionResponse(BaseModel):
    status: str


class GameResponse(BaseModel):
    game_id: str
    game_mode: str
    board_size: int
    status: GameStatus
    player_a: str
    player_b: Optional[str]
    commitment_a: str
    commitment_b: Optional[str]
    turn: int
    hits_a: List[int]
    hits_b: List[int]
    hit_count_a: int
    hit_count_b: int
    initialized: bool
    game_over: bool
    winner: int
    pending_shot: Optional[Tuple[int, int]]
    pending_shot_by: Optional[str]
    revealed_a: bool
    revealed_b: bool
    state_version: int

    @classmethod
    def from_game(cls, game: Game) -> "GameResponse":
        return cls(
            game_id=game.id,
            game_mode=game.game_mode,
            board_size=game.board_size,
            status=game.status,
            player_a=game.player_a,
            player_b=game.player_b,
            commitment_a=game.commitment_a.hex(),
            commitment_b=game.commitment_b.hex() if game.commitment_b else None,
            turn=game.turn,
            hits_a=game.hits_a,
            hits_b=game.hits_b,
            hit_count_a=game.hit_count_a,
            hit_count_b=game.hit_count_b,
            initialized=game.initialized,
            game_over=game.game_over,
            winner=game.winner,
            pending_shot=game.pending_shot,
            pending_shot_by=game.pending_shot_by,
            revealed_a=game.revealed_a,
            revealed_b=game.revealed_b,
            state_version=game.state_version,
        )


class ShotHistoryEntry(BaseModel):
    shot_number: int
    shooter: int
    defender: int
    x: int
    y: int
    coordinate: str
    hit: bool


class GameModeResponse(BaseModel):
    name: str
    board_size: int
    ship_lengths: List[int]
    total_ship_squares: int
