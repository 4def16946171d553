"""Tests for analytics reports and exports."""
import pytest

from app.application.services import export_service


@pytest.fixture
def inventory(create_product):
    """Three products over two categories; Hammer and Milk are low on stock."""
    return {
        "hammer": create_product(name="Hammer", category="Tools", quantity=4, price=10, supplier="Acme"),
        "saw": create_product(name="Saw", category="Tools", quantity=10, price=5, supplier="Acme"),
        "milk": create_product(name="Milk", category="Dairy", quantity=0, price=2, supplier="  "),
    }


@pytest.mark.parametrize("path", [
    "/api/analytics/dashboard",
    "/api/analytics/inventory-value",
    "/api/analytics/stock-movement",
    "/api/analytics/category-performance",
    "/api/analytics/supplier-analysis",
    "/api/analytics/export",
])
def test_analytics_requires_token(client, path):
    response = client.get(path)

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Access token required"


def test_dashboard(client, auth_headers, inventory):
    response = client.get("/api/analytics/dashboard", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["overview"] == {
        "total_products": 3,
        "low_stock_count": 2,
        "out_of_stock_count": 1,
        "total_value": 90.0,
    }
    assert data["category_stats"][0]["category"] == "Tools"
    assert len(data["recent_products"]) == 3
    assert data["top_categories"] == [
        {"category": "Tools", "count": 2},
        {"category": "Dairy", "count": 1},
    ]


def test_dashboard_empty(client, auth_headers):
    response = client.get("/api/analytics/dashboard", headers=auth_headers)

    data = response.json()
    assert data["overview"]["total_products"] == 0
    assert data["overview"]["total_value"] == 0
    assert data["recent_products"] == []


def test_inventory_value(client, auth_headers, inventory):
    response = client.get("/api/analytics/inventory-value", headers=auth_headers)

    data = response.json()
    assert data["total_value"] == 90
    assert data["count"] == 3
    assert [item["name"] for item in data["items"]] == ["Saw", "Hammer", "Milk"]
    assert data["items"][0]["value"] == 50
    assert data["items"][2]["stock_status"] == "out-of-stock"


def test_inventory_value_sorted_and_filtered(client, auth_headers, inventory):
    response = client.get(
        "/api/analytics/inventory-value?category=Tools&sortBy=name&order=asc",
        headers=auth_headers,
    )

    data = response.json()
    assert [item["name"] for item in data["items"]] == ["Hammer", "Saw"]
    assert data["total_value"] == 90


def test_inventory_value_bad_sort(client, auth_headers):
    response = client.get("/api/analytics/inventory-value?sortBy=secret", headers=auth_headers)

    assert response.status_code == 400


def test_stock_movement(client, auth_headers, inventory):
    client.put(f"/api/products/{inventory['saw']['id']}", json={"quantity": 25}, headers=auth_headers)
    client.put(f"/api/products/{inventory['hammer']['id']}", json={"quantity": 1}, headers=auth_headers)

    response = client.get("/api/analytics/stock-movement?days=7", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["period"] == "7 days"
    assert data["total_items"] == 2
    by_name = {item["name"]: item for item in data["items"]}
    assert by_name["Saw"]["days_since_restock"] in (0, 1)
    assert by_name["Hammer"]["last_sold"] is not None
    assert by_name["Hammer"]["days_since_restock"] is None
    assert data["items"][0]["name"] == "Saw"


@pytest.mark.parametrize("days", [0, 366])
def test_stock_movement_days_out_of_range(client, auth_headers, days):
    response = client.get(f"/api/analytics/stock-movement?days={days}", headers=auth_headers)

    assert response.status_code == 400


def test_category_performance(client, auth_headers, inventory):
    response = client.get("/api/analytics/category-performance", headers=auth_headers)

    data = response.json()
    tools, dairy = data["categories"]
    assert tools["category"] == "Tools"
    assert tools["total_products"] == 2
    assert tools["total_quantity"] == 14
    assert tools["total_value"] == 90
    assert tools["avg_price"] == 7.5
    assert tools["low_stock_count"] == 1
    assert tools["stock_health"] == 50.0
    assert dairy["out_of_stock_count"] == 1
    assert dairy["stock_health"] == 0.0
    assert data["summary"] == {"total_categories": 2, "total_products": 3, "total_value": 90}


def test_supplier_analysis_skips_blank_suppliers(client, auth_headers, inventory):
    response = client.get("/api/analytics/supplier-analysis", headers=auth_headers)

    data = response.json()
    assert [s["supplier"] for s in data["suppliers"]] == ["Acme"]
    acme = data["suppliers"][0]
    assert acme["total_products"] == 2
    assert acme["avg_value_per_product"] == 45.0
    assert data["summary"]["total_suppliers"] == 1


def test_export_json(client, auth_headers, inventory):
    response = client.get("/api/analytics/export?type=low-stock", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["type"] == "low-stock"
    assert data["count"] == 2
    assert {p["name"] for p in data["data"]} == {"Hammer", "Milk"}
    assert data["timestamp"]


def test_export_categories_csv(client, auth_headers, inventory):
    response = client.get("/api/analytics/export?type=categories&format=csv", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    today = export_service.get_current_date().isoformat()
    assert f'filename="category-report-{today}.csv"' in response.headers["content-disposition"]
    assert response.text.split("\n") == [
        "category,count,total_quantity",
        '"Tools",2,14',
        '"Dairy",1,0',
    ]


def test_export_inventory_csv(client, auth_headers, inventory):
    response = client.get("/api/analytics/export?type=inventory&format=csv", headers=auth_headers)

    lines = response.text.split("\n")
    assert lines[0].startswith("id,name,description,quantity,threshold,category,price")
    assert len(lines) == 4
    assert "inventory-report-" in response.headers["content-disposition"]


def test_export_csv_empty(client, auth_headers):
    response = client.get("/api/analytics/export?format=csv", headers=auth_headers)

    assert response.status_code == 200
    assert response.text == ""


def test_export_bad_type(client, auth_headers):
    response = client.get("/api/analytics/export?type=everything", headers=auth_headers)

    assert response.status_code == 400
