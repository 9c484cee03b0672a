"""
Tests for the Order repository.
"""
import pytest

from adapters.base import ORDERS
from core.errors import NotFound
from core.orders import COUNTER_BLOB_KEY, OrderRepository, sort_newest_first

from conftest import FixedClock


@pytest.fixture
def repo(store):
    return OrderRepository(store, clock=FixedClock())


class TestCreate:

    def test_defaults(self, repo):
        order = repo.create({"customer": {"name": "Ann"}})
        assert order["sequenceNumber"] == 1000
        assert order["orderNumber"] == "o1000"
        assert order["status"] == "shop production"
        assert order["items"] == []
        assert order["hardware"] is None
        assert order["specialPricing"] is False
        assert order["grandTotal"] == 0
        assert order["createdAt"] == "2026-01-05T15:30:00.000Z"
        assert order["invoiceDate"] is None
        assert order["id"].startswith("order_")

    def test_numbers_increase(self, repo):
        a = repo.create({})
        b = repo.create({})
        assert (a["orderNumber"], b["orderNumber"]) == ("o1000", "o1001")

    def test_trusted_sequence_number(self, repo):
        order = repo.create({"sequenceNumber": 4242})
        assert order["orderNumber"] == "o4242"
        # counter untouched
        assert repo.create({})["orderNumber"] == "o1000"

    def test_zero_sequence_number_draws_from_counter(self, repo):
        assert repo.create({"sequenceNumber": 0})["orderNumber"] == "o1000"

    def test_unknown_fields_not_stored(self, repo, store):
        order = repo.create({"status": "completed", "hacker": "yes"})
        assert "hacker" not in store.get(ORDERS, order["id"])

    def test_unknown_status_preserved(self, repo):
        order = repo.create({"status": "waiting on glass"})
        assert order["status"] == "waiting on glass"

    def test_blank_totals_default_to_zero(self, repo):
        order = repo.create({"customer": {"name": "Ann"}, "grandTotal": "", "grandTotalWithTax": "  "})
        assert order["grandTotal"] == 0
        assert order["grandTotalWithTax"] == 0

    def test_numeric_string_totals_accepted(self, repo):
        order = repo.create({"grandTotal": "120.50", "grandTotalWithTax": 130})
        assert order["grandTotal"] == 120.5
        assert order["grandTotalWithTax"] == 130

    def test_stored_body_has_no_id(self, repo, store):
        order = repo.create({})
        assert "id" not in store.get(ORDERS, order["id"])


class TestReadUpdateDelete:

    def test_get_missing(self, repo):
        with pytest.raises(NotFound) as exc:
            repo.get("order_nope")
        assert exc.value.status_code == 404

    def test_update_merges_and_refreshes(self, store):
        repo = OrderRepository(store, clock=FixedClock())
        order = repo.create({"customer": {"name": "Ann"}, "notes": "keep"})
        repo.clock = FixedClock("2026-02-01T00:00:00.000Z")
        updated = repo.update(order["id"], {"status": "completed", "sequenceNumber": 5000})
        assert updated["status"] == "completed"
        assert updated["orderNumber"] == "o5000"
        assert updated["notes"] == "keep"
        assert updated["createdAt"] == "2026-01-05T15:30:00.000Z"
        assert updated["updatedAt"] == "2026-02-01T00:00:00.000Z"

    def test_update_blank_status_falls_back(self, repo):
        order = repo.create({"status": "completed"})
        assert repo.update(order["id"], {"status": ""})["status"] == "completed"

    def test_update_blank_total_clears_to_zero(self, repo):
        order = repo.create({"grandTotal": 50})
        assert repo.update(order["id"], {"grandTotal": ""})["grandTotal"] == 0

    def test_update_ignores_unlisted_fields(self, repo):
        order = repo.create({})
        updated = repo.update(order["id"], {"createdAt": "1999-01-01", "isAdmin": True})
        assert updated["createdAt"] == "2026-01-05T15:30:00.000Z"
        assert "isAdmin" not in updated

    def test_update_missing(self, repo):
        with pytest.raises(NotFound):
            repo.update("order_nope", {"status": "completed"})

    def test_delete(self, repo):
        order = repo.create({})
        repo.delete(order["id"])
        with pytest.raises(NotFound):
            repo.get(order["id"])
        repo.delete(order["id"])


class TestList:

    def test_newest_first_and_counter_skipped(self, store):
        store.set(ORDERS, COUNTER_BLOB_KEY, {"value": 5})
        store.set(ORDERS, "a", {"orderNumber": "o1", "createdAt": "2026-01-01T00:00:00.000Z"})
        store.set(ORDERS, "b", {"orderNumber": "o2", "createdAt": "2026-03-01T00:00:00.000Z"})
        store.set(ORDERS, "c", {"orderNumber": "o3"})
        ids = [o["id"] for o in OrderRepository(store).list()]
        assert ids == ["b", "a", "c"]

    def test_search_order_number_and_customer(self, store):
        store.set(ORDERS, "a", {"orderNumber": "o1001", "customer": {"name": "Smith Homes"}})
        store.set(ORDERS, "b", {"orderNumber": "o1002", "customer": {"name": "Jones"}, "notes": "smith"})
        repo = OrderRepository(store)
        assert [o["id"] for o in repo.list(search="SMITH")] == ["a"]
        assert [o["id"] for o in repo.list(search="o1002")] == ["b"]

    def test_sort_helper_handles_garbage_dates(self):
        docs = [{"createdAt": "not a date"}, {"createdAt": "2026-01-01"}]
        assert sort_newest_first(docs)[0]["createdAt"] == "2026-01-01"
