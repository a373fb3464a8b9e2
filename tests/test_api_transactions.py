import pytest

from conftest import register_and_login


def add(client, headers, **payload):
    r = client.post("/api/transactions", headers=headers, json=payload)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def seeded(client, auth_headers):
    add(client, auth_headers, label="Salary", category="Income", amount=3000, type="income", date="2024-02-01")
    add(client, auth_headers, label="Rent", category="Housing", amount=1200, type="expense", date="2024-02-03")
    add(client, auth_headers, label="Groceries", category="Food", amount=150.5, date="2024-02-10T18:30:00Z")
    add(client, auth_headers, label="Coffee", category="Food", amount=4.5, date="2024-01-20")
    add(client, auth_headers, label="Uber home", category="Transport", amount=22, date="2024-01-05")
    return auth_headers


def labels(response):
    return [t["label"] for t in response.json()]


def test_parse_quick_add(client, auth_headers):
    r = client.post("/api/transactions/parse", headers=auth_headers, json={"text": "-$12.50 coffee"})
    assert r.status_code == 200
    body = r.json()
    assert body["amount"] == 12.5
    assert body["type"] == "expense"
    assert body["category"] == "Food"
    assert body["label"] == "-$12.50 coffee"


def test_parse_without_amount(client, auth_headers):
    r = client.post("/api/transactions/parse", headers=auth_headers, json={"text": "went for a walk"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Unable to parse input"

    r = client.post("/api/transactions/parse", headers=auth_headers, json={})
    assert r.status_code == 400


def test_parse_requires_auth(client):
    assert client.post("/api/transactions/parse", json={"text": "coffee 4"}).status_code == 401


def test_create_defaults(client, auth_headers):
    trx = add(client, auth_headers, label="Snacks", amount=3)
    assert trx["type"] == "expense"
    assert trx["category"] == "General"
    assert trx["id"] > 0


def test_create_validation(client, auth_headers):
    r = client.post("/api/transactions", headers=auth_headers, json={"label": "x", "amount": -4})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid transaction payload"

    r = client.post("/api/transactions", headers=auth_headers, json={"label": "x", "amount": 4, "type": "transfer"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid type"


def test_list_newest_first(client, seeded):
    r = client.get("/api/transactions", headers=seeded)
    assert labels(r) == ["Groceries", "Rent", "Salary", "Coffee", "Uber home"]
    assert r.json()[0]["occurred_at"].startswith("2024-02-10T18:30:00")


def test_list_filters(client, seeded):
    r = client.get("/api/transactions", headers=seeded, params={"type": "income"})
    assert labels(r) == ["Salary"]

    r = client.get("/api/transactions", headers=seeded, params={"category": "Food", "from": "2024-02-01"})
    assert labels(r) == ["Groceries"]

    r = client.get("/api/transactions", headers=seeded, params={"to": "2024-02-10"})
    assert "Groceries" in labels(r)

    r = client.get("/api/transactions", headers=seeded, params={"q": "UBER"})
    assert labels(r) == ["Uber home"]

    r = client.get("/api/transactions", headers=seeded, params={"type": "bogus"})
    assert len(r.json()) == 5


def test_update_is_partial(client, auth_headers):
    trx = add(client, auth_headers, label="Lunch", category="Food", amount=12, date="2024-03-01")

    r = client.put(f"/api/transactions/{trx['id']}", headers=auth_headers, json={"amount": 15})
    assert r.status_code == 200
    body = r.json()
    assert body["amount"] == 15
    assert body["label"] == "Lunch"
    assert body["occurred_at"].startswith("2024-03-01")

    r = client.put(f"/api/transactions/{trx['id']}", headers=auth_headers,
                   json={"type": "income", "date": "2024-03-05"})
    assert r.json()["type"] == "income"
    assert r.json()["occurred_at"].startswith("2024-03-05")


def test_update_errors(client, auth_headers):
    trx = add(client, auth_headers, label="Lunch", amount=12)

    r = client.put(f"/api/transactions/{trx['id']}", headers=auth_headers, json={})
    assert r.status_code == 400
    assert r.json()["detail"] == "No valid fields to update"

    r = client.put(f"/api/transactions/{trx['id']}", headers=auth_headers, json={"type": "gift"})
    assert r.status_code == 400

    r = client.put(f"/api/transactions/{trx['id']}", headers=auth_headers, json={"amount": 0})
    assert r.status_code == 400

    r = client.put("/api/transactions/123456", headers=auth_headers, json={"amount": 5})
    assert r.status_code == 404
    assert r.json()["detail"] == "Not found"


def test_update_and_delete_are_scoped(client, auth_headers):
    trx = add(client, auth_headers, label="Lunch", amount=12)
    other = register_and_login(client, email="bob@example.com")

    r = client.put(f"/api/transactions/{trx['id']}", headers=other, json={"amount": 1})
    assert r.status_code == 404

    r = client.delete(f"/api/transactions/{trx['id']}", headers=other)
    assert r.json() == {"message": "Deleted"}
    assert len(client.get("/api/transactions", headers=auth_headers).json()) == 1

    client.delete(f"/api/transactions/{trx['id']}", headers=auth_headers)
    assert client.get("/api/transactions", headers=auth_headers).json() == []


def test_summary(client, seeded):
    r = client.get("/api/analytics/summary", headers=seeded)
    assert r.json() == {"income": 3000, "expenses": 1377, "savings": 1623}

    r = client.get("/api/analytics/summary", headers=seeded, params={"from": "2024-01-01", "to": "2024-01-31"})
    assert r.json() == {"income": 0, "expenses": 26.5, "savings": -26.5}


def test_category_totals(client, seeded):
    r = client.get("/api/analytics/categories", headers=seeded)
    assert r.json() == [
        {"category": "Housing", "total": 1200},
        {"category": "Food", "total": 155},
        {"category": "Transport", "total": 22},
    ]


def test_trends(client, seeded):
    r = client.get("/api/analytics/trends", headers=seeded)
    assert r.json() == [
        {"month": "2024-01", "income": 0, "expenses": 26.5},
        {"month": "2024-02", "income": 3000, "expenses": 1350.5},
    ]


def test_series(client, seeded):
    r = client.get("/api/analytics/series", headers=seeded, params={"granularity": "month", "top": 2})
    body = r.json()
    assert body["granularity"] == "month"
    assert body["top_categories"] == ["Housing", "Food"]
    assert body["buckets"][0] == {"key": "2024-01", "total": 26.5, "categories": {"Housing": 0, "Food": 4.5}}

    r = client.get("/api/analytics/series", headers=seeded)
    assert r.json()["granularity"] == "day"
    assert len(r.json()["top_categories"]) == 3

    r = client.get("/api/analytics/series", headers=seeded, params={"granularity": "week"})
    assert r.status_code == 400


def test_series_over_expenses(client, auth_headers):
    client.post("/api/expenses", headers=auth_headers,
                json={"label": "Rent", "category": "Housing", "amount": 800, "date": "2024-05-01"})
    r = client.get("/api/analytics/series", headers=auth_headers,
                   params={"granularity": "year", "source": "expenses"})
    assert r.json()["buckets"] == [{"key": "2024", "total": 800, "categories": {"Housing": 800}}]


def test_far_future_bound_is_accepted(client, seeded):
    r = client.get("/api/transactions", headers=seeded, params={"to": "9999-12-31"})
    assert r.status_code == 200
    assert len(r.json()) == 5

    r = client.get("/api/transactions", headers=seeded, params={"from": "0001-01-01T00:00:00+05:00"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid date range"


def test_blank_category_on_update_falls_back_to_general(client, auth_headers):
    trx = add(client, auth_headers, label="Lunch", category="Food", amount=12)

    r = client.put(f"/api/transactions/{trx['id']}", headers=auth_headers, json={"category": ""})
    assert r.status_code == 200
    assert r.json()["category"] == "General"

    r = client.get("/api/transactions", headers=auth_headers, params={"category": "General"})
    assert labels(r) == ["Lunch"]
