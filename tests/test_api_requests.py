from conftest import auth

ADMIN = auth("admin-token")


class TestPropertyRequests:
    payload = {"name": "Otieno", "contact": "0712345678", "location": "Juja", "message": "Bedsitter near JKUAT"}

    def test_submit_is_open_to_visitors(self, client, store):
        response = client.post("/api/v1/requests/", json=self.payload)
        assert response.status_code == 201
        body = response.json()
        assert body["contacted"] is False
        assert store.get(f"propertyRequests/{body['id']}/name") == "Otieno"

    def test_invalid_request(self, client):
        assert client.post("/api/v1/requests/", json={"name": "", "contact": "x"}).status_code == 422

    def test_listing_requires_admin(self, client):
        assert client.get("/api/v1/requests/", headers=auth()).status_code == 403

    def test_mark_contacted(self, client, store):
        request_id = client.post("/api/v1/requests/", json=self.payload).json()["id"]
        response = client.post(f"/api/v1/requests/{request_id}/contacted", headers=ADMIN)
        assert response.status_code == 200
        assert response.json()["contacted"] is True

        listed = client.get("/api/v1/requests/", headers=ADMIN).json()
        assert listed[0]["id"] == request_id
        assert listed[0]["contacted"] is True
        assert store.get(f"propertyRequests/{request_id}/message") == "Bedsitter near JKUAT"

    def test_mark_missing(self, client):
        assert client.post("/api/v1/requests/nope/contacted", headers=ADMIN).status_code == 404
