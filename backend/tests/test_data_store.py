# Overview: Pytest coverage for DataStore loading, persistence, ids and change notification.

"""
DataStore Tests

Covers:
- Seeding default categories on first load only
- Tolerant loading of malformed records
- Ids never reused after deletes, across reloads
- Observer subscribe/unsubscribe and topics
- Replay of an interrupted sale journal
- Full save/reload round trip of every collection
"""

from datetime import datetime
from decimal import Decimal

import pytest

from grocer.models import Transaction, TransactionItem
from grocer.services import catalog_service, sales_service, settings_service
from grocer.services.data_store import (
    DEFAULT_CATEGORIES,
    KEY_PENDING_SALE,
    KEY_PRODUCTS,
    DataStore,
    next_id,
)
from grocer.services.record_store import JsonFileRecordStore


class FailingRecordStore(JsonFileRecordStore):
    """Loads normally but refuses every write."""

    def save(self, key, value):
        return False

    def save_many(self, values):
        return False


@pytest.mark.smoke
class TestLoading:
    def test_first_load_seeds_default_categories(self, store, records):
        assert [c.name for c in store.categories] == list(DEFAULT_CATEGORIES)
        assert [c.id for c in store.categories] == [1, 2, 3, 4, 5]
        assert len(records.load("categories")) == 5

    def test_seeding_happens_once(self, store, records):
        catalog_service.add_category(store, "Bakery")
        reloaded = DataStore(records)
        assert [c.name for c in reloaded.categories][-1] == "Bakery"
        assert len(reloaded.categories) == 6

    def test_defaults_when_nothing_stored(self, store):
        assert store.products == []
        assert store.transactions == []
        assert store.settings.store_name == "My Grocery Store"
        assert store.settings.tax_rate == Decimal("5.0")

    def test_malformed_products_load_as_empty(self, records):
        records.save("products", [{"id": "not-a-number"}])
        store = DataStore(records)
        assert store.products == []

    def test_non_list_collection_loads_as_empty(self, records):
        records.save("transactions", {"id": 1})
        assert DataStore(records).transactions == []

    def test_products_reload_with_decimal_prices(self, store, records, make_product):
        make_product(name="Cheese", price="4.99", quantity=7)
        reloaded = DataStore(records)
        product = reloaded.find_product(1)
        assert product.price == Decimal("4.99")
        assert product.category_name == "Dairy Products"
        assert product.is_low_stock is True

    def test_transaction_without_date_is_malformed(self, records):
        records.save("transactions", [{"id": 1, "items": [], "subTotal": "0", "taxAmount": "0", "totalAmount": "0"}])
        assert DataStore(records).transactions == []

        with pytest.raises(ValueError):
            Transaction.from_record({"id": 2, "date": "  "})

    def test_everything_survives_reload(self, store, records, make_product):
        """
        SCENARIO: every collection is changed through the services, then reloaded
        EXPECTED: the reloaded store equals the one that wrote it
        """
        make_product(
            name="Basmati Rice", category_id=1, price="12.345", quantity=40,
            unit="kg", barcode="5012345678900", description="Long grain, 5kg bag",
        )
        make_product(name="Oat Milk", price="2.10", quantity=8)
        catalog_service.update_category(store, 2, "Dairy & Alternatives")
        settings_service.update_settings(
            store,
            {"store_name": "Corner Shop", "tax_rate": Decimal("7.25"), "currency_symbol": "€", "low_stock_threshold": 5},
        )
        sales_service.record_sale(
            store,
            [{"product_id": 1, "quantity": 2}, {"product_id": 2, "quantity": 3}],
            now=datetime(2024, 5, 1, 9, 30, 15),
        )

        reloaded = DataStore(records)

        assert reloaded.categories == store.categories
        assert reloaded.products == store.products
        assert reloaded.transactions == store.transactions
        assert reloaded.settings == store.settings
        assert reloaded.find_product(2).category_name == "Dairy & Alternatives"
        assert reloaded.transactions[0].items[0].unit_price == Decimal("12.345")


class TestIds:
    def test_next_id(self):
        assert next_id([]) == 1
        assert next_id([Transaction(id=4), Transaction(id=2)]) == 5
        assert next_id([Transaction(id=4)], high_water=9) == 10

    def test_deleted_id_is_not_reused(self, store, records, make_product):
        """
        SCENARIO: the newest product is deleted and the store is reloaded
        EXPECTED: the next product still gets a fresh id
        """
        make_product(name="A")
        make_product(name="B")
        catalog_service.delete_product(store, 2)

        reloaded = DataStore(records)
        assert reloaded.next_product_id() == 3
        added = catalog_service.add_product(reloaded, reloaded.find_product(1))
        assert added.id == 3

    def test_peek_does_not_consume(self, store):
        assert store.next_category_id() == 6
        assert store.next_category_id() == 6


class TestObservers:
    def test_subscribers_receive_topics(self, store, make_product):
        seen = []
        token = store.subscribe(seen.append)

        make_product()
        catalog_service.add_category(store, "Bakery")
        store.refresh()

        assert seen == ["products", "categories", "refresh"]
        assert store.unsubscribe(token) is True
        assert store.unsubscribe(token) is False

        store.refresh()
        assert seen[-1] == "refresh" and len(seen) == 3

    def test_view_is_refreshed_before_notification(self, store, make_product):
        make_product(name="Juice", category_id=3, quantity=50)
        names = []
        store.subscribe(lambda topic: names.append(store.find_product(1).category_name))

        catalog_service.update_category(store, 3, "Drinks")
        assert names == ["Drinks"]

    def test_failing_subscriber_does_not_block_others(self, store, make_product, caplog):
        def broken(topic):
            raise RuntimeError("display went away")

        seen = []
        store.subscribe(broken)
        store.subscribe(seen.append)

        make_product()

        assert seen == ["products"]
        assert len(DataStore(store.records).products) == 1
        assert "Subscriber failed for products" in caplog.text


class TestPersistenceFailures:
    def test_save_failure_is_reported_not_raised(self, tmp_path):
        store = DataStore(FailingRecordStore(tmp_path), default_categories=())
        catalog_service.add_category(store, "Bakery")
        assert store.save_categories() is False
        # in-memory state still moves forward
        assert [c.name for c in store.categories] == ["Bakery"]


class TestSaleJournal:
    def _journal(self):
        transaction = Transaction(
            id=1,
            date=datetime(2024, 3, 1, 9, 30),
            items=[TransactionItem(1, "Milk", 2, Decimal("1.00"), Decimal("2.00"))],
            sub_total=Decimal("2.00"),
            tax_amount=Decimal("0.10"),
            total_amount=Decimal("2.10"),
        )
        return {"transaction": transaction.to_record(), "stock": {"1": 18}}

    def test_interrupted_sale_is_replayed(self, store, records, make_product):
        """
        SCENARIO: a crash left the journal behind after the ledger write
        EXPECTED: next load applies the sale once and clears the journal
        """
        make_product(name="Milk", quantity=20)
        records.save(KEY_PENDING_SALE, self._journal())

        reloaded = DataStore(records)

        assert [t.id for t in reloaded.transactions] == [1]
        assert reloaded.find_product(1).quantity == 18
        assert records.load(KEY_PENDING_SALE) is None
        assert records.load(KEY_PRODUCTS)[0]["quantity"] == 18

        # replaying again must not duplicate the transaction
        records.save(KEY_PENDING_SALE, self._journal())
        assert len(DataStore(records).transactions) == 1

    def test_unreadable_journal_is_discarded(self, store, records):
        records.save(KEY_PENDING_SALE, {"transaction": "garbage"})
        reloaded = DataStore(records)
        assert reloaded.transactions == []
        assert records.load(KEY_PENDING_SALE) is None
