"""
Services

純計算，不做狀態轉換：
- commitment_service: 棋盤承諾與鹽值
- fleet_service: 遊戲模式、艦隊驗證、隨機艦隊
- board_service: 座標與命中陣列
- naming_service: 遊戲 ID
- history_service / state_service: 稽核輔助
"""
