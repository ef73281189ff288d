"""
Core 協議邏輯

所有會改變遊戲狀態的操作都在這裡：
- State machine: 推導並驗證遊戲狀態
- GameManager: 建立與加入遊戲
- ShotManager: 射擊 / 回報循環
- FairnessAuditor: 賽後公開棋盤
- Locks: 行級鎖與樂觀鎖
"""
