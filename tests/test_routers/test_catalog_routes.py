"""
Integration tests for category, subcategory and item management routes.
"""

import uuid

import pytest

from app.models.catalog import PricingKind


def _create_category(client, name="Beverages", **fields):
    body = {"name": name, "tax_applicable": True, "tax_percentage": 5, **fields}
    response = client.post("/categories", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def _create_item(client, category_id, name="Cappuccino", **fields):
    body = {
        "category_id": category_id,
        "name": name,
        "pricing_kind": PricingKind.STATIC,
        "pricing_config": {"base_price": 200},
        **fields,
    }
    response = client.post("/items", json=body)
    assert response.status_code == 201, response.text
    return response.json()


class TestCategories:
    def test_create_and_get(self, client):
        created = _create_category(client)
        response = client.get(f"/categories/{created['id']}")
        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Beverages"
        assert body["tax_applicable"] is True
        assert body["subcategories"] == []

    def test_tax_percentage_required_when_applicable(self, client):
        response = client.post("/categories", json={"name": "Food", "tax_applicable": True})
        assert response.status_code == 422

    def test_duplicate_name_conflicts(self, client):
        _create_category(client)
        response = client.post("/categories", json={"name": "Beverages"})
        assert response.status_code == 409
        assert response.json()["error"] == "DuplicateName"

    def test_unknown_category_is_404(self, client):
        response = client.get(f"/categories/{uuid.uuid4()}")
        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "CategoryNotFound"
        assert body["message"] == "Category not found"

    def test_update(self, client):
        created = _create_category(client)
        response = client.put(
            f"/categories/{created['id']}", json={"description": "Drinks of all kinds"}
        )
        assert response.status_code == 200
        assert response.json()["description"] == "Drinks of all kinds"

    def test_update_cannot_enable_tax_without_percentage(self, client):
        created = _create_category(client, name="Food", tax_applicable=False, tax_percentage=None)
        response = client.put(f"/categories/{created['id']}", json={"tax_applicable": True})
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidConfiguration"

    def test_soft_delete(self, client):
        created = _create_category(client)
        response = client.delete(f"/categories/{created['id']}")
        assert response.status_code == 200
        assert client.get(f"/categories/{created['id']}").json()["is_active"] is False

    def test_list_paginates_and_filters(self, client):
        for name in ["Beverages", "Food", "Meeting Rooms"]:
            _create_category(client, name=name)
        food = client.get("/categories", params={"search": "foo"}).json()
        assert [c["name"] for c in food["data"]] == ["Food"]

        page = client.get("/categories", params={"limit": 2, "page": 2}).json()
        assert [c["name"] for c in page["data"]] == ["Meeting Rooms"]
        assert page["pagination"] == {"total": 3, "page": 2, "limit": 2, "total_pages": 2}

        reversed_page = client.get("/categories", params={"order": "desc"}).json()
        assert reversed_page["data"][0]["name"] == "Meeting Rooms"


class TestSubcategories:
    def test_create_under_category(self, client):
        category = _create_category(client)
        response = client.post(
            f"/categories/{category['id']}/subcategories",
            json={"name": "Cold Drinks", "tax_applicable": True, "tax_percentage": 8},
        )
        assert response.status_code == 201
        sub = response.json()
        assert sub["category_id"] == category["id"]

        detail = client.get(f"/categories/{category['id']}").json()
        assert [s["name"] for s in detail["subcategories"]] == ["Cold Drinks"]

    def test_name_unique_within_category(self, client):
        category = _create_category(client)
        url = f"/categories/{category['id']}/subcategories"
        client.post(url, json={"name": "Hot Drinks"})
        response = client.post(url, json={"name": "Hot Drinks"})
        assert response.status_code == 409

    def test_unknown_parent(self, client):
        response = client.post(f"/categories/{uuid.uuid4()}/subcategories", json={"name": "X1"})
        assert response.status_code == 404

    def test_deactivated_subcategory_hidden_from_category_detail(self, client):
        category = _create_category(client)
        sub = client.post(
            f"/categories/{category['id']}/subcategories", json={"name": "Hot Drinks"}
        ).json()
        assert client.delete(f"/subcategories/{sub['id']}").status_code == 200
        assert client.get(f"/subcategories/{sub['id']}").json()["is_active"] is False
        assert client.get(f"/categories/{category['id']}").json()["subcategories"] == []

    def test_update(self, client):
        category = _create_category(client)
        sub = client.post(
            f"/categories/{category['id']}/subcategories", json={"name": "Hot Drinks"}
        ).json()
        response = client.put(f"/subcategories/{sub['id']}", json={"tax_applicable": False})
        assert response.status_code == 200
        assert response.json()["tax_applicable"] is False


class TestItems:
    def test_create_with_addons(self, client):
        category = _create_category(client)
        item = _create_item(
            client,
            category["id"],
            addons=[{"name": "Extra shot", "price": 50}, {"name": "Oat milk", "price": 40}],
        )
        assert item["category"]["name"] == "Beverages"
        assert item["subcategory"] is None
        assert sorted(a["name"] for a in item["addons"]) == ["Extra shot", "Oat milk"]

    def test_create_under_subcategory(self, client):
        category = _create_category(client)
        sub = client.post(
            f"/categories/{category['id']}/subcategories", json={"name": "Hot Drinks"}
        ).json()
        response = client.post(
            "/items",
            json={
                "subcategory_id": sub["id"],
                "name": "Latte",
                "pricing_kind": "static",
                "pricing_config": {"base_price": 180},
            },
        )
        assert response.status_code == 201
        assert response.json()["subcategory"]["name"] == "Hot Drinks"

    @pytest.mark.parametrize(
        "parents",
        [{}, {"category_id": "c", "subcategory_id": "s"}],
    )
    def test_exactly_one_parent_required(self, client, parents):
        category = _create_category(client)
        sub = client.post(
            f"/categories/{category['id']}/subcategories", json={"name": "Hot Drinks"}
        ).json()
        ids = {"c": category["id"], "s": sub["id"]}
        body = {
            "name": "Orphan",
            "pricing_kind": "static",
            "pricing_config": {"base_price": 1},
            **{k: ids[v] for k, v in parents.items()},
        }
        assert client.post("/items", json=body).status_code == 422

    @pytest.mark.parametrize(
        "kind,config",
        [
            ("tiered", {"tiers": []}),
            ("discounted", {"base_price": 100}),
            ("dynamic", {"time_windows": [{"start": "11:00", "end": "10:00", "price": 1}]}),
            ("auction", {}),
        ],
    )
    def test_config_must_match_kind(self, client, kind, config):
        category = _create_category(client)
        body = {
            "category_id": category["id"],
            "name": "Bad config",
            "pricing_kind": kind,
            "pricing_config": config,
        }
        assert client.post("/items", json=body).status_code == 422

    def test_availability_only_on_bookable_items(self, client):
        category = _create_category(client)
        body = {
            "category_id": category["id"],
            "name": "Room",
            "pricing_kind": "static",
            "pricing_config": {"base_price": 1},
            "availability_config": {"days": ["Monday"]},
        }
        assert client.post("/items", json=body).status_code == 422

    def test_unknown_parent_is_404(self, client):
        body = {
            "category_id": str(uuid.uuid4()),
            "name": "Ghost",
            "pricing_kind": "complimentary",
        }
        response = client.post("/items", json=body)
        assert response.status_code == 404
        assert response.json()["error"] == "CategoryNotFound"

    def test_duplicate_name_under_same_parent(self, client):
        category = _create_category(client)
        _create_item(client, category["id"])
        body = {
            "category_id": category["id"],
            "name": "Cappuccino",
            "pricing_kind": "static",
            "pricing_config": {"base_price": 1},
        }
        assert client.post("/items", json=body).status_code == 409

    def test_update_rechecks_merged_config(self, client):
        category = _create_category(client)
        item = _create_item(client, category["id"])
        response = client.put(f"/items/{item['id']}", json={"pricing_kind": "tiered"})
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidConfiguration"

        response = client.put(
            f"/items/{item['id']}",
            json={
                "pricing_kind": "tiered",
                "pricing_config": {"tiers": [{"max_units": 1, "price": 9}]},
            },
        )
        assert response.status_code == 200
        assert response.json()["pricing_kind"] == "tiered"

    def test_update_moves_item_to_subcategory(self, client):
        category = _create_category(client)
        item = _create_item(client, category["id"])
        sub = client.post(
            f"/categories/{category['id']}/subcategories", json={"name": "Hot Drinks"}
        ).json()
        response = client.put(f"/items/{item['id']}", json={"subcategory_id": sub["id"]})
        assert response.status_code == 200
        body = response.json()
        assert body["category_id"] is None
        assert body["subcategory"]["name"] == "Hot Drinks"

    def test_soft_delete(self, client):
        category = _create_category(client)
        item = _create_item(client, category["id"])
        assert client.delete(f"/items/{item['id']}").status_code == 200
        assert client.get(f"/items/{item['id']}").json()["is_active"] is False

    def test_unknown_item_is_404(self, client):
        response = client.get(f"/items/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["error"] == "ItemNotFound"


class TestItemListing:
    @pytest.fixture
    def catalog(self, client):
        beverages = _create_category(client)
        rooms = _create_category(client, name="Meeting Rooms", tax_percentage=18)
        _create_item(client, beverages["id"], name="Cappuccino")
        _create_item(client, beverages["id"], name="Espresso", pricing_config={"base_price": 120})
        _create_item(
            client,
            beverages["id"],
            name="Welcome Drink",
            pricing_kind="complimentary",
            pricing_config={},
        )
        _create_item(
            client,
            rooms["id"],
            name="Conference Room A",
            pricing_kind="tiered",
            pricing_config={"tiers": [{"max_units": 1, "price": 300}]},
        )
        return {"beverages": beverages, "rooms": rooms}

    def _names(self, client, **params):
        response = client.get("/items", params=params)
        assert response.status_code == 200, response.text
        return [item["name"] for item in response.json()["data"]]

    def test_default_sorted_by_name(self, client, catalog):
        assert self._names(client) == [
            "Cappuccino",
            "Conference Room A",
            "Espresso",
            "Welcome Drink",
        ]

    def test_search_is_case_insensitive(self, client, catalog):
        assert self._names(client, search="ESPR") == ["Espresso"]

    def test_filter_by_category_and_kind(self, client, catalog):
        assert self._names(client, category_id=catalog["rooms"]["id"]) == ["Conference Room A"]
        assert self._names(client, pricing_kind="complimentary") == ["Welcome Drink"]

    def test_price_range_only_matches_static_items(self, client, catalog):
        assert self._names(client, min_price=100, max_price=150) == ["Espresso"]
        assert self._names(client, min_price=0) == ["Cappuccino", "Espresso"]

    def test_active_filter(self, client, catalog):
        espresso = client.get("/items", params={"search": "Espresso"}).json()["data"][0]
        client.delete(f"/items/{espresso['id']}")
        assert "Espresso" not in self._names(client, active=True)
        assert self._names(client, active=False) == ["Espresso"]

    def test_pagination_meta(self, client, catalog):
        body = client.get("/items", params={"limit": 3, "sort_by": "name", "order": "desc"}).json()
        assert [i["name"] for i in body["data"]] == [
            "Welcome Drink",
            "Espresso",
            "Conference Room A",
        ]
        assert body["pagination"]["total"] == 4
        assert body["pagination"]["total_pages"] == 2

    def test_limit_is_capped(self, client, catalog):
        assert client.get("/items", params={"limit": 1000}).status_code == 422
