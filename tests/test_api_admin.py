from conftest import UnavailableStore, auth

from houselook.db.store import MemoryRecordStore
from houselook.services.analytics_service import analytics_service

ADMIN = auth("admin-token")


class TestAccess:
    def test_non_admin_is_rejected(self, client):
        response = client.get("/api/v1/admin/statistics", headers=auth())
        assert response.status_code == 403

    def test_anonymous_is_rejected(self, client):
        assert client.get("/api/v1/admin/dashboard").status_code == 401


class TestStatistics:
    def test_counts(self, client):
        body = client.get("/api/v1/admin/statistics", headers=ADMIN).json()
        assert body["totalUsers"] == 2
        assert body["totalProperties"] == 3
        assert body["totalRevenue"] == 0

    def test_revenue_from_transactions(self, client, store):
        store.set("transactions", {"t1": {"amount": 500}, "t2": {"amount": "250"}})
        assert client.get("/api/v1/admin/statistics", headers=ADMIN).json()["totalRevenue"] == 750

    def test_store_offline_degrades_to_zero(self):
        assert analytics_service.get_admin_statistics(UnavailableStore()) == {
            "totalUsers": 0, "totalProperties": 0, "totalRevenue": 0,
        }
        assert analytics_service.get_user_analytics(MemoryRecordStore()) == {
            "userTypes": [], "registrationTrends": [], "topUsers": [],
        }


class TestAnalytics:
    def test_property_analytics(self, client):
        body = client.get("/api/v1/admin/analytics/properties", headers=ADMIN).json()
        assert [b["value"] for b in body["priceRanges"]] == [0, 1, 1, 1]
        assert body["locationDistribution"][0]["value"] == 1

    def test_user_analytics(self, client):
        body = client.get("/api/v1/admin/analytics/users", headers=ADMIN).json()
        assert body["topUsers"][0]["id"] == "admin-1"
        assert body["topUsers"][0]["status"] == "Premium"
        assert len(body["registrationTrends"]) == 12

    def test_realtime(self, client):
        body = client.get("/api/v1/admin/analytics/realtime", headers=ADMIN).json()
        assert body["activeSessions"] == 0
        assert "currentTime" in body

    def test_unknown_section(self, client):
        assert client.get("/api/v1/admin/analytics/bogus", headers=ADMIN).status_code == 404


class TestDashboard:
    def test_first_request_loads_everything(self, client):
        body = client.get("/api/v1/admin/dashboard", headers=ADMIN).json()
        assert body["error"] is None
        assert body["stats"]["totalProperties"] == 3
        assert body["xp"] == {"totalXp": 68, "revenueXp": 48, "listingXp": 20, "averagePrice": 16000}
        assert body["availability"] == {"available": 2, "full": 1, "total": 3}
        assert len(body["propertyGrowth"]) == 12
        assert body["userGrowth"] == 0
        assert "refreshedAt" in body


class TestReports:
    def test_users_csv(self, client):
        response = client.get("/api/v1/admin/reports/users", headers=ADMIN)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "houselook_users_report_" in response.headers["content-disposition"]
        lines = response.text.split("\n")
        assert lines[0].startswith("id,")
        assert len(lines) == 3

    def test_empty_collection(self, client):
        response = client.get("/api/v1/admin/reports/transactions", headers=ADMIN)
        assert response.status_code == 200
        assert response.text == ""

    def test_unknown_report(self, client):
        assert client.get("/api/v1/admin/reports/secrets", headers=ADMIN).status_code == 404
