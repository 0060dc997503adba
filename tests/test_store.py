from houselook.db.store import MemoryRecordStore, read_collection


class TestMemoryRecordStore:
    def test_set_and_get_nested(self):
        store = MemoryRecordStore()
        store.set("users/u1/points", 100)
        assert store.get("users/u1") == {"points": 100}
        assert store.get("users/u2") is None

    def test_get_returns_a_copy(self):
        store = MemoryRecordStore({"users": {"u1": {"points": 1}}})
        store.get("users/u1")["points"] = 99
        assert store.get("users/u1/points") == 1

    def test_update_applies_multi_segment_keys(self):
        store = MemoryRecordStore({"users": {"u1": {"name": "A"}}})
        store.update("users/u1", {"saved/p1": True, "timesaved/p1": 5})
        assert store.get("users/u1") == {"name": "A", "saved": {"p1": True}, "timesaved": {"p1": 5}}

    def test_none_deletes_and_prunes_empty_parents(self):
        store = MemoryRecordStore({"users": {"u1": {"saved": {"p1": True}}}})
        store.set("users/u1/saved/p1", None)
        assert store.get("users") is None

    def test_push_keys_are_unique_and_ordered(self):
        store = MemoryRecordStore()
        first = store.push("propertyRequests", {"n": 1})
        second = store.push("propertyRequests", {"n": 2})
        assert first != second
        assert set(store.get("propertyRequests")) == {first, second}

    def test_subscribe_fires_now_and_on_overlapping_writes(self):
        store = MemoryRecordStore()
        seen = []
        unsubscribe = store.subscribe("statistics", seen.append)
        store.set("statistics/totalUsers", 3)
        store.set("users/u1/name", "A")
        unsubscribe()
        store.set("statistics/totalUsers", 4)
        assert seen == [None, {"totalUsers": 3}]

    def test_transaction_applies_update_to_current_value(self):
        store = MemoryRecordStore({"users": {"u1": {"points": 100}}})
        assert store.transaction("users/u1/points", lambda current: current + 50) == 150
        assert store.transaction("users/u2/points", lambda current: (current or 0) + 5) == 5
        assert store.transaction("users/u1/points", lambda current: None) is None
        assert store.get("users/u1") is None


class TestReadCollection:
    def test_list_values_are_rekeyed(self):
        store = MemoryRecordStore({"property": [None, {"rent": 1}, "junk"]})
        assert read_collection(store, "property") == {"1": {"rent": 1}}

    def test_missing_collection(self):
        assert read_collection(MemoryRecordStore(), "property") == {}
