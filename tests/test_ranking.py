import pytest

from houselook.services import ranking


class TestXp:
    def test_revenue_and_listing_xp(self):
        properties = {str(i): {"rent": 15625, "available": True} for i in range(8)}
        assert ranking.compute_xp(properties) == {"totalXp": 205, "revenueXp": 125, "listingXp": 80}

    def test_inactive_listings_earn_no_listing_xp(self):
        properties = {
            "a": {"rent": "KES 1,999", "available": False},
            "b": {"rent": 500, "status": "available"},
        }
        assert ranking.compute_xp(properties) == {"totalXp": 12, "revenueXp": 2, "listingXp": 10}

    def test_empty(self):
        assert ranking.compute_xp({})["totalXp"] == 0


class TestMomGrowth:
    @pytest.mark.parametrize("series,expected", [
        ([2, 3], 50.0),
        ([10, 50, 75], 50.0),
        ([0, 5], 100.0),
        ([0, 0], 0.0),
        ([7], 0.0),
        ([], 0.0),
        ([4, 2], -50.0),
    ])
    def test_growth(self, series, expected):
        assert ranking.mom_growth(series) == expected


class TestTopUsers:
    def test_sorted_by_points_and_capped(self):
        users = {f"u{i}": {"name": f"User {i}", "points": i * 10} for i in range(15)}
        top = ranking.top_users(users)
        assert len(top) == 10
        assert top[0]["id"] == "u14"
        assert [u["points"] for u in top] == sorted((u["points"] for u in top), reverse=True)

    def test_ties_keep_store_order(self):
        users = {"b": {"points": 50}, "a": {"points": 50}, "c": {"points": 80}}
        assert [u["id"] for u in ranking.top_users(users)] == ["c", "b", "a"]

    def test_premium_status_and_name_fallback(self):
        users = {
            "x": {"email": "x@example.com", "points": 301},
            "y": {"points": 300},
        }
        top = ranking.top_users(users)
        assert top[0]["name"] == "x@example.com"
        assert top[0]["status"] == "Premium"
        assert top[1]["name"] == "Unknown User"
        assert top[1]["status"] == "Active"


class TestClassification:
    def test_first_match_wins(self):
        assert ranking.classify_user({"role": "agent", "properties": {"p": True}}) == ranking.AGENT
        assert ranking.classify_user({"userType": "agent"}) == ranking.AGENT
        assert ranking.classify_user({"properties": {"p": True}, "saved": {"x": True}}) == ranking.PROPERTY_OWNER
        assert ranking.classify_user({"saved": {"x": True}}) == ranking.TENANT
        assert ranking.classify_user({"saved": {}}) == ranking.INACTIVE

    def test_distribution_labels(self):
        users = {"a": {"role": "agent"}, "b": {"saved": {"x": True}}, "c": {}}
        assert ranking.user_type_distribution(users) == [
            {"name": "Property Owners", "value": 0},
            {"name": "Tenants", "value": 1},
            {"name": "Agents", "value": 1},
            {"name": "Inactive", "value": 1},
        ]


class TestRevenueLevels:
    def test_window_amounts_and_streak(self):
        monthly = [0] * 8 + [100, 200, 0, 300]
        levels = {lvl["level"]: lvl for lvl in ranking.revenue_levels(monthly)}
        assert levels["Bronze"]["amount"] == 300
        assert levels["Silver"]["amount"] == 500
        assert levels["Gold"]["amount"] == 600
        assert levels["Diamond"]["amount"] == 600
        assert levels["Bronze"]["streak"] == 1

    def test_growth_against_previous_window(self):
        monthly = [0] * 10 + [100, 150]
        levels = {lvl["level"]: lvl for lvl in ranking.revenue_levels(monthly)}
        assert levels["Bronze"]["growth"] == 50.0
        # No earlier year to compare with
        assert levels["Diamond"]["growth"] == 0.0


class TestAchievements:
    def test_thresholds(self):
        earned = ranking.achievements({"totalXp": 1200}, 100, 49, 15000)
        assert [a["title"] for a in earned] == ["XP Master", "Active Community", "Premium Market"]

    def test_none(self):
        assert ranking.achievements({}, 0, 0, 0) == []
