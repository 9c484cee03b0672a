"""
Tests for Order -> Invoice conversion.
"""
import pytest

from adapters.base import INVOICE_SEQUENCES, INVOICES, ORDERS
from core.errors import NotFound, ValidationError
from core.invoices import InvoiceGenerator
from core.orders import OrderRepository
from core.sequences import COUNTER_KEY

from conftest import FixedClock

NOW = "2026-01-07T09:00:00.000Z"


@pytest.fixture
def orders(store):
    return OrderRepository(store, clock=FixedClock())


@pytest.fixture
def generator(store, orders):
    return InvoiceGenerator(store, orders=orders, clock=FixedClock(NOW))


@pytest.fixture
def order(orders):
    return orders.create({
        "customer": {"name": "ann lee", "creditTerms": "net 30"},
        "items": [{"description": "1/4 clear", "qty": 2}],
        "grandTotal": 100,
        "grandTotalWithTax": 107,
        "vendorName": "ACME",
    })


class TestInvoice:

    def test_creates_invoice_and_marks_order(self, generator, store, order):
        invoice = generator.invoice({"orderId": order["id"]})

        assert invoice["invoiceNumber"] == "I1000"
        assert invoice["sequenceNumber"] == 1000
        assert invoice["status"] == "INVOICED"
        assert invoice["terms"] == "net 30"
        assert invoice["orderNumber"] == order["orderNumber"]
        assert invoice["grandTotalWithTax"] == 107
        assert invoice["invoiceDate"] == invoice["createdAt"] == NOW
        assert invoice["id"].startswith("invoice_")

        stored = store.get(ORDERS, order["id"])
        assert stored["status"] == "INVOICED"
        assert stored["invoiceNumber"] == "I1000"
        for key in ("invoiceDate", "pickedUpAt", "updatedAt"):
            assert stored[key] == NOW
        assert stored["terms"] == "net 30"

    def test_idempotent(self, generator, store, order):
        first = generator.invoice({"orderId": order["id"]})
        second = generator.invoice({"orderId": order["id"]})

        assert second == {
            "alreadyInvoiced": True,
            "orderId": order["id"],
            "invoiceNumber": first["invoiceNumber"],
            "orderNumber": order["orderNumber"],
        }
        assert len(store.list_keys(INVOICES)) == 1
        assert store.get(INVOICE_SEQUENCES, COUNTER_KEY) == {"value": 1000}

    def test_snapshot_is_frozen(self, generator, orders, order):
        invoice = generator.invoice({"orderId": order["id"]})
        orders.update(order["id"], {"customer": {"name": "someone else"}})
        assert generator.get(invoice["id"])["customer"]["name"] == "ann lee"

    def test_terms_fallbacks(self, generator, orders):
        with_terms = orders.create({"terms": "cod"})
        bare = orders.create({})
        assert generator.invoice({"orderId": with_terms["id"]})["terms"] == "cod"
        assert generator.invoice({"orderId": bare["id"]})["terms"] == "DUE UPON RECEIPT"

    def test_numbers_increase(self, generator, orders):
        a, b = orders.create({}), orders.create({})
        assert generator.invoice({"orderId": a["id"]})["invoiceNumber"] == "I1000"
        assert generator.invoice({"orderId": b["id"]})["invoiceNumber"] == "I1001"

    def test_order_id_required(self, generator):
        with pytest.raises(ValidationError) as exc:
            generator.invoice({})
        assert exc.value.message == "orderId is required"

    def test_missing_order(self, generator, store):
        with pytest.raises(NotFound):
            generator.invoice({"orderId": "order_missing"})
        assert store.list_keys(INVOICES) == []
        assert store.get(INVOICE_SEQUENCES, COUNTER_KEY) is None

    def test_status_alone_is_not_invoiced(self, generator, orders):
        order = orders.create({"status": "INVOICED"})
        assert generator.invoice({"orderId": order["id"]})["invoiceNumber"] == "I1000"


class TestRead:

    def test_list_newest_first(self, store, orders):
        order_a, order_b = orders.create({}), orders.create({})
        InvoiceGenerator(store, orders=orders, clock=FixedClock("2026-01-01T00:00:00.000Z")).invoice(
            {"orderId": order_a["id"]}
        )
        InvoiceGenerator(store, orders=orders, clock=FixedClock("2026-03-01T00:00:00.000Z")).invoice(
            {"orderId": order_b["id"]}
        )
        listed = InvoiceGenerator(store).list()
        assert [i["orderId"] for i in listed] == [order_b["id"], order_a["id"]]

    def test_get_missing(self, generator):
        with pytest.raises(NotFound):
            generator.get("invoice_missing")
