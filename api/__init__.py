"""
HTTP 層

輕薄的 FastAPI routers：解析請求、呼叫 core managers、把協議異常對應到狀態碼。
遊戲規則不寫在這裡
"""
