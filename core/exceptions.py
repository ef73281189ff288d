"""
自定義異常類別

集中管理所有協議異常，方便 API 層統一對應 HTTP 狀態碼

每個異常都屬於五大類之一（狀態、授權、輸入、完整性、容量），
在 @transactional 操作內拋出任何一個都會讓整個操作 rollback
"""


class BattleshipProtocolException(Exception):
    """所有協議異常的基類"""
    pass


class GameNotFound(BattleshipProtocolException):
    """遊戲不存在"""
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} not found")


# ============ 異常分類 ============

class StateViolation(BattleshipProtocolException):
    """遊戲狀態不允許此操作"""
    pass


class AuthorizationViolation(BattleshipProtocolException):
    """呼叫者無權執行此操作"""
    pass


class InputViolation(BattleshipProtocolException):
    """輸入格式錯誤或超出範圍"""
    pass


class IntegrityViolation(BattleshipProtocolException):
    """
    公開的資料與承諾或對局紀錄不符

    上層應用應視為作弊證據
    """
    pass


class CapacityViolation(BattleshipProtocolException):
    """遊戲位置已被佔用"""
    pass


# ============ 狀態相關異常 ============

class GameNotReady(StateViolation):
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} is not ready - waiting for second player")


class GameAlreadyOver(StateViolation):
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} is over")


class GameNotOver(StateViolation):
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} is not over yet - cannot reveal")


class ShotAlreadyPending(StateViolation):
    """已有一發射擊在等待防守方回報"""
    pass


class NoPendingShot(StateViolation):
    """沒有待回報的射擊"""
    pass


class AlreadyRevealed(StateViolation):
    """此棋盤已經公開過了"""
    pass


class InvalidStateTransition(StateViolation):
    """非法的狀態轉換"""
    pass


class ConcurrentModification(StateViolation):
    """讀取後遊戲已被另一個請求修改（state_version 不符）"""
    def __init__(self, operation):
        self.operation = operation
        super().__init__(
            f"{operation} rejected - the game was modified by a concurrent request"
        )


# ============ 授權相關異常 ============

class NotAPlayer(AuthorizationViolation):
    def __init__(self, player):
        self.player = player
        super().__init__(f"{player} is not a player in this game")


class NotYourTurn(AuthorizationViolation):
    def __init__(self, player):
        self.player = player
        super().__init__(f"Not your turn ({player})")


class SelfJoin(AuthorizationViolation):
    """玩家 A 不能加入自己的遊戲"""
    pass


class NotDefender(AuthorizationViolation):
    """只有被射擊的一方可以回報結果"""
    pass


class NotPlayerA(AuthorizationViolation):
    pass


class NotPlayerB(AuthorizationViolation):
    pass


# ============ 輸入相關異常 ============

class InvalidCoordinate(InputViolation):
    def __init__(self, x, y, board_size):
        self.x = x
        self.y = y
        super().__init__(
            f"Invalid coordinate ({x}, {y}) - must be 0-{board_size - 1}"
        )


class CellAlreadyShot(InputViolation):
    def __init__(self, x, y):
        self.x = x
        self.y = y
        super().__init__(f"Already shot at coordinate ({x}, {y})")


class MalformedBoard(InputViolation):
    pass


class MalformedSalt(InputViolation):
    pass


class MalformedCommitment(InputViolation):
    pass


class UnknownGameMode(InputViolation):
    def __init__(self, game_mode):
        self.game_mode = game_mode
        super().__init__(f"Unknown game mode '{game_mode}'")


# ============ 完整性相關異常 ============

class CommitmentMismatch(IntegrityViolation):
    """公開的棋盤與鹽值算出的雜湊和承諾不符"""
    pass


class InconsistentReveal(IntegrityViolation):
    """公開的棋盤與對局中回報的命中/未命中矛盾"""
    def __init__(self, cells):
        self.cells = cells
        super().__init__(
            f"Cheating detected - shot results don't match revealed board at cells {cells}"
        )


class InvalidFleetConfiguration(IntegrityViolation):
    pass


# ============ 容量相關異常 ============

class GameFull(CapacityViolation):
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} is already full")


class AlreadyExists(CapacityViolation):
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} already exists")
