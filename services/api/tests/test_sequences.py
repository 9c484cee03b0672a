"""
Tests for the durable named counters.
"""
import pytest

from adapters.base import INVOICE_SEQUENCES, ORDER_SEQUENCES
from core.sequences import COUNTER_KEY, SequenceGenerator


class TestSequenceGenerator:

    def test_first_value_is_seed_plus_one(self, store):
        seq = SequenceGenerator(store)
        assert seq.next("orders") == 1000
        assert seq.next("invoices") == 1000
        assert seq.next("residential-requests") == 1

    def test_strictly_increasing(self, store):
        seq = SequenceGenerator(store)
        values = [seq.next("orders") for _ in range(25)]
        assert values == list(range(1000, 1025))

    def test_sequences_are_independent(self, store):
        seq = SequenceGenerator(store)
        seq.next("orders")
        seq.next("orders")
        assert seq.next("invoices") == 1000
        assert store.get(ORDER_SEQUENCES, COUNTER_KEY) == {"value": 1001}
        assert store.get(INVOICE_SEQUENCES, COUNTER_KEY) == {"value": 1000}

    def test_persisted_counter_resumes(self, store):
        store.set(ORDER_SEQUENCES, COUNTER_KEY, {"value": 2041})
        assert SequenceGenerator(store).next("orders") == 2042

    @pytest.mark.parametrize("bad", ["12", True, None, float("nan")])
    def test_non_numeric_counter_reads_as_seed(self, store, bad):
        store.set(ORDER_SEQUENCES, COUNTER_KEY, {"value": bad})
        assert SequenceGenerator(store).next("orders") == 1000

    def test_custom_name_and_seed(self, store):
        seq = SequenceGenerator(store)
        assert seq.next("test-counter", seed=49) == 50
        assert seq.next("test-counter", seed=49) == 51
        assert seq.peek("test-counter") == 51

    def test_peek_does_not_increment(self, store):
        seq = SequenceGenerator(store)
        assert seq.peek("orders") == 999
        assert seq.peek("orders") == 999
        assert seq.next("orders") == 1000
