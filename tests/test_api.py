from conftest import ROOM_AVAILABILITY

# 2024-01-01 is a Monday
MONDAY = "2024-01-01"


def create(client, path, payload):
    response = client.post(f"/api/v1/{path}", json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()["data"]


def seed_item(client, **overrides):
    category = create(
        client, "categories", {"name": "Spaces", "tax_applicable": True, "tax_percentage": 10}
    )
    subcategory = create(
        client, "subcategories", {"name": "Rooms", "category_id": category["id"]}
    )
    payload = {
        "name": "Boardroom",
        "subcategory_id": subcategory["id"],
        "pricing_type": "static",
        "pricing_details": {"static_price": 50},
    }
    payload.update(overrides)
    return create(client, "items", payload)


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_success_envelope(client):
    response = client.post("/api/v1/categories", json={"name": "Spaces"})
    body = response.get_json()

    assert response.status_code == 201
    assert body["success"] is True
    assert body["data"]["name"] == "Spaces"
    assert body["message"] == "Category created successfully"


def test_not_found_envelope(client):
    response = client.get("/api/v1/categories/404")
    body = response.get_json()

    assert response.status_code == 404
    assert body == {"success": False, "error": "not_found", "message": "Category not found"}


def test_schema_errors_are_bad_request(client):
    response = client.post("/api/v1/categories", json={"tax_percentage": 150})
    body = response.get_json()

    assert response.status_code == 400
    assert body["success"] is False
    assert body["details"]["errors"]


def test_duplicate_category_conflicts(client):
    create(client, "categories", {"name": "Spaces"})

    response = client.post("/api/v1/categories", json={"name": "spaces"})

    assert response.status_code == 409


def test_paginated_list(client):
    for name in ("A", "B", "C"):
        create(client, "categories", {"name": name})

    response = client.get("/api/v1/categories?page=1&limit=2&sort_by=name&sort_order=asc")
    body = response.get_json()

    assert response.status_code == 200
    assert [c["name"] for c in body["data"]] == ["A", "B"]
    assert body["pagination"]["total"] == 3
    assert body["pagination"]["has_next_page"] is True


def test_unknown_pricing_type_is_bad_request(client):
    response = client.post(
        "/api/v1/items",
        json={"name": "X", "subcategory_id": 1, "pricing_type": "auction"},
    )

    assert response.status_code == 400


def test_overlapping_tiers_conflict(client):
    tiers = {
        "tiers": [
            {"min_quantity": 1, "max_quantity": 10, "price_per_unit": 50},
            {"min_quantity": 5, "max_quantity": 20, "price_per_unit": 45},
        ]
    }
    category = create(client, "categories", {"name": "Spaces"})
    subcategory = create(client, "subcategories", {"name": "Rooms", "category_id": category["id"]})

    response = client.post(
        "/api/v1/items",
        json={
            "name": "Bulk",
            "subcategory_id": subcategory["id"],
            "pricing_type": "tiered",
            "pricing_details": tiers,
        },
    )

    assert response.status_code == 409
    assert response.get_json()["error"] == "conflict"


def test_price_endpoint(client):
    item = seed_item(client)
    addon = create(client, "addons", {"name": "Coffee", "price": 5, "item_id": item["id"]})

    response = client.get(f"/api/v1/items/{item['id']}/price?quantity=3&addon_ids={addon['id']}")
    price = response.get_json()["data"]

    assert response.status_code == 200
    assert price["subtotal"] == 155.0
    assert price["tax_amount"] == 15.5
    assert price["final_price"] == 170.5


def test_no_matching_tier_is_unprocessable(client):
    item = seed_item(
        client,
        pricing_type="tiered",
        pricing_details={"tiers": [{"min_quantity": 1, "max_quantity": 10, "price_per_unit": 5}]},
    )

    response = client.get(f"/api/v1/items/{item['id']}/price?quantity=50")

    assert response.status_code == 422
    assert response.get_json()["error"] == "business_rule_violation"


def test_booking_flow(client):
    item = seed_item(client, is_bookable=True, availability=ROOM_AVAILABILITY)
    booking = {
        "item_id": item["id"],
        "user_email": "Guest@Acme.io",
        "date": MONDAY,
        "start_time": "09:00",
        "end_time": "10:00",
    }

    created = client.post("/api/v1/bookings", json=booking)
    clash = client.post("/api/v1/bookings", json=dict(booking, start_time="10:00", end_time="11:00"))
    slots = client.get(f"/api/v1/bookings/availability/{item['id']}?date={MONDAY}")
    mine = client.get("/api/v1/bookings/user/guest@acme.io")

    assert created.status_code == 201
    assert created.get_json()["data"]["user_email"] == "guest@acme.io"
    assert clash.status_code == 409
    assert [s["is_available"] for s in slots.get_json()["data"]["slots"]] == [False, False, True]
    assert len(mine.get_json()["data"]) == 1


def test_booking_bad_time_format(client):
    item = seed_item(client, is_bookable=True, availability=ROOM_AVAILABILITY)

    response = client.post(
        "/api/v1/bookings",
        json={
            "item_id": item["id"],
            "user_email": "guest@acme.io",
            "date": MONDAY,
            "start_time": "9am",
            "end_time": "10:00",
        },
    )

    assert response.status_code == 400


def test_invalid_transition_conflicts(client):
    item = seed_item(client, is_bookable=True, availability=ROOM_AVAILABILITY)
    created = create(
        client,
        "bookings",
        {
            "item_id": item["id"],
            "user_email": "guest@acme.io",
            "date": MONDAY,
            "start_time": "14:00",
            "end_time": "16:00",
        },
    )

    cancelled = client.post(f"/api/v1/bookings/{created['id']}/cancel")
    reopened = client.put(f"/api/v1/bookings/{created['id']}", json={"status": "confirmed"})

    assert cancelled.get_json()["data"]["status"] == "cancelled"
    assert reopened.status_code == 409
    assert reopened.get_json()["details"] == {
        "current_status": "cancelled",
        "target_status": "confirmed",
    }


def test_delete_category_hides_children(client):
    item = seed_item(client)

    deleted = client.delete("/api/v1/categories/1")
    lookup = client.get(f"/api/v1/items/{item['id']}")

    assert deleted.status_code == 200
    assert lookup.status_code == 404
