from .helpers import USER_ID, add_expense, add_goal, add_holding


def test_dashboard_rolls_up_every_section(client, today):
    client.post("/budgets", json={"name": "Groceries", "budgeted": 500, "userId": USER_ID})
    for day in range(1, 7):
        add_expense(client, date=f"2001-01-0{day}", description=f"Purchase {day}", amount=10)
    add_expense(client, date=today.isoformat(), description="Big shop", amount=120)
    add_holding(client, quantity=10, purchasePrice=100, currentPrice=110)
    add_goal(client, name="Vacation Fund", targetAmount=3000, currentAmount=1800)
    client.post("/investments/refresh", json={"userId": USER_ID})

    body = client.get("/dashboard", query_string={"userId": USER_ID}).get_json()

    budget = body["budgetSummary"]
    assert budget["totalBudget"] == 500.0
    assert budget["categories"][0]["name"] == "Groceries"
    assert budget["categories"][0]["budget"] == 500.0
    assert budget["totalSpent"] == 120.0
    assert budget["categories"][0]["spent"] == 120.0

    assert len(body["recentExpenses"]) == 5
    assert body["recentExpenses"][0]["description"] == "Big shop"
    assert body["recentExpenses"][-1]["description"] == "Purchase 3"

    investments = body["investmentSummary"]
    assert len(investments["portfolioHistory"]) == 1
    assert investments["totalValue"] == investments["portfolioHistory"][0]["value"]

    assert body["goalSummary"][0]["name"] == "Vacation Fund"
    assert body["goalSummary"][0]["progress"] == 60


def test_dashboard_for_new_user(client):
    body = client.get("/dashboard", query_string={"userId": "fresh"}).get_json()
    assert body["budgetSummary"] == {"totalBudget": 0.0, "totalSpent": 0.0, "categories": []}
    assert body["recentExpenses"] == []
    assert body["investmentSummary"]["totalValue"] == 0.0
    assert body["goalSummary"] == []
