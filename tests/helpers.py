USER_ID = "user-1"


def add_expense(client, user_id=USER_ID, **overrides):
    payload = {
        "date": "2025-04-10",
        "description": "Grocery Store",
        "category": "Groceries",
        "amount": 120.50,
        "userId": user_id,
    }
    payload.update(overrides)
    return client.post("/expenses", json=payload)


def add_holding(client, user_id=USER_ID, **overrides):
    payload = {
        "name": "Apple Inc.",
        "ticker": "AAPL",
        "quantity": 10,
        "purchasePrice": 150.0,
        "currentPrice": 175.5,
        "purchaseDate": "2024-01-15",
        "userId": user_id,
    }
    payload.update(overrides)
    return client.post("/investments", json=payload)


def add_goal(client, user_id=USER_ID, **overrides):
    payload = {
        "name": "Emergency Fund",
        "targetAmount": 10000,
        "currentAmount": 7500,
        "targetDate": "2099-12-31",
        "userId": user_id,
    }
    payload.update(overrides)
    return client.post("/goals", json=payload)
