from conftest import auth


class TestSearch:
    def test_default_price_range_excludes_over_30k(self, client, store):
        store.set("property/p4", {"name": "Villa", "town": "Karen", "rent": 90000})
        response = client.get("/api/v1/properties/")
        assert response.status_code == 200
        assert {h["id"] for h in response.json()} == {"p1", "p2", "p3"}

    def test_location_filter_matches_town_substring(self, client):
        response = client.get("/api/v1/properties/", params={"location": "kaha"})
        assert [h["id"] for h in response.json()] == ["p2"]

    def test_price_range_is_inclusive(self, client):
        response = client.get("/api/v1/properties/", params={"min_price": 8000, "max_price": 15000})
        assert {h["id"] for h in response.json()} == {"p1", "p2"}

    def test_amenities_must_all_be_present(self, client):
        response = client.get("/api/v1/properties/", params={"amenities": "wifi,water"})
        assert [h["id"] for h in response.json()] == ["p1", "p3"]

    def test_room_type(self, client):
        response = client.get("/api/v1/properties/", params={"room_type": "1 bed"})
        assert [h["id"] for h in response.json()] == ["p2"]

    def test_card_shape(self, client):
        card = next(h for h in client.get("/api/v1/properties/").json() if h["id"] == "p2")
        assert card["rent"] == 15000
        assert card["city"] == "Kahawa"
        assert card["image"] == "https://img.example.com/1.jpg"

    def test_store_offline_returns_empty(self, offline_client):
        response = offline_client.get("/api/v1/properties/")
        assert response.status_code == 200
        assert response.json() == []


class TestDetail:
    def test_detail(self, client):
        response = client.get("/api/v1/properties/p3")
        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Ruaka Court"
        assert body["location"] == "Ruaka"
        assert body["price"] == 25000
        assert body["available"] is False
        assert body["saved"] is False

    def test_detail_shows_saved_state(self, client):
        client.put("/api/v1/saved/p1", headers=auth())
        assert client.get("/api/v1/properties/p1", headers=auth()).json()["saved"] is True

    def test_missing(self, client):
        assert client.get("/api/v1/properties/nope").status_code == 404


class TestAdminListing:
    payload = {
        "property_name": "Green Court",
        "rent_amount": "KES 12,000",
        "amenities": "Wifi, Parking",
        "town": "Thika",
        "agent_name": "Jane",
        "agent_phone": "0712345678",
    }

    def test_create_requires_admin(self, client):
        response = client.post("/api/v1/properties/", json=self.payload, headers=auth())
        assert response.status_code == 403
        assert response.json()["detail"] == "Access denied. Admins only."

    def test_create_and_read_back(self, client, store):
        response = client.post("/api/v1/properties/", json=self.payload, headers=auth("admin-token"))
        assert response.status_code == 201
        property_id = response.json()["id"]

        record = store.get(f"property/{property_id}")
        assert record["id"] == property_id
        assert record["rent"] == 12000
        assert record["amenities"] == ["Wifi", "Parking"]
        assert record["available"] is True
        assert record["createdBy"] == "admin-1"

    def test_update(self, client, store):
        response = client.patch(
            "/api/v1/properties/p1", json={"rent": "9,500", "available": False}, headers=auth("admin-token")
        )
        assert response.status_code == 200
        assert store.get("property/p1/rent") == 9500
        assert store.get("property/p1/available") is False
        assert store.get("property/p1/name") == "Sunrise Apartments"

    def test_update_missing(self, client):
        response = client.patch("/api/v1/properties/nope", json={"rent": 1}, headers=auth("admin-token"))
        assert response.status_code == 404

    def test_mine(self, client, store):
        store.update("property/p2", {"createdBy": "user-1"})
        response = client.get("/api/v1/properties/mine", headers=auth())
        assert [h["id"] for h in response.json()] == ["p2"]
