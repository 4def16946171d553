"""Tests for bulk product create and delete."""
import uuid


def test_bulk_create_mixed(client, auth_headers, create_product):
    create_product(name="Existing")

    response = client.post(
        "/api/products/bulk",
        json={
            "products": [
                {"name": "Hammer", "quantity": 4, "category": "Tools"},
                {"name": "Saw", "quantity": -2},
                {"name": "existing", "quantity": 1},
                {"name": "hammer", "quantity": 9},
                {"quantity": 3},
                {"name": "Drill", "quantity": "12", "price": "89.99"},
            ]
        },
        headers=auth_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Successfully added 2 products"
    assert data["added"] == 2
    assert data["failed"] == 4
    assert [p["name"] for p in data["results"]] == ["Hammer", "Drill"]

    errors = {e["index"]: e for e in data["errors"]}
    assert set(errors) == {1, 2, 3, 4}
    assert errors[1]["name"] == "Saw"
    assert errors[1]["error"].startswith("quantity")
    assert errors[2]["error"] == "A product with this name already exists"
    assert errors[3]["error"] == "A product with this name already exists"
    assert errors[4]["name"] == "Unknown"


def test_bulk_create_non_object_items(client, auth_headers):
    """Items that are not objects fail on their own; the rest are still created."""
    response = client.post(
        "/api/products/bulk",
        json={"products": [{"name": "Alpha", "quantity": 2}, "oops", None, 7]},
        headers=auth_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["added"] == 1
    assert [p["name"] for p in data["results"]] == ["Alpha"]
    assert data["errors"] == [
        {"index": 1, "name": "Unknown", "error": "Product must be an object"},
        {"index": 2, "name": "Unknown", "error": "Product must be an object"},
        {"index": 3, "name": "Unknown", "error": "Product must be an object"},
    ]
    assert client.get("/api/products").json()["pagination"]["total_items"] == 1


def test_bulk_create_all_valid(client, auth_headers):
    response = client.post(
        "/api/products/bulk",
        json={"products": [{"name": "Hammer", "quantity": 1}, {"name": "Wrench", "quantity": 2}]},
        headers=auth_headers,
    )

    assert response.status_code == 201
    assert response.json()["added"] == 2
    assert response.json()["errors"] == []
    assert client.get("/api/products").json()["pagination"]["total_items"] == 2


def test_bulk_create_empty_list(client, auth_headers):
    response = client.post("/api/products/bulk", json={"products": []}, headers=auth_headers)

    assert response.status_code == 400


def test_bulk_create_requires_token(client):
    response = client.post("/api/products/bulk", json={"products": [{"name": "Hammer", "quantity": 1}]})

    assert response.status_code == 401


def test_bulk_delete(client, auth_headers, create_product):
    first = create_product(name="First")
    second = create_product(name="Second")
    keep = create_product(name="Keep")
    missing = str(uuid.uuid4())

    response = client.request(
        "DELETE",
        "/api/products/bulk",
        json={"ids": [first["id"], second["id"], missing, "not-an-id"]},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Successfully deleted 2 products"
    assert data["deleted_count"] == 2
    assert data["deleted_ids"] == sorted([first["id"], second["id"]])
    assert data["not_found_ids"] == [missing, "not-an-id"]

    remaining = client.get("/api/products").json()["products"]
    assert [p["id"] for p in remaining] == [keep["id"]]


def test_bulk_delete_nothing_found(client, auth_headers):
    missing = str(uuid.uuid4())

    response = client.request("DELETE", "/api/products/bulk", json={"ids": [missing]}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["deleted_count"] == 0
    assert response.json()["not_found_ids"] == [missing]


def test_bulk_delete_empty_ids(client, auth_headers):
    response = client.request("DELETE", "/api/products/bulk", json={"ids": []}, headers=auth_headers)

    assert response.status_code == 400


def test_bulk_delete_requires_token(client, create_product):
    product = create_product()

    response = client.request("DELETE", "/api/products/bulk", json={"ids": [product["id"]]})

    assert response.status_code == 401
    assert client.get(f"/api/products/{product['id']}").status_code == 200
