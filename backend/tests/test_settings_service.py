import tempfile
import unittest
from decimal import Decimal

from grocer.models import Product
from grocer.services import catalog_service, settings_service
from grocer.services.data_store import DataStore
from grocer.services.record_store import JsonFileRecordStore
from grocer.services.settings_service import SettingsError


class SettingsServiceTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.records = JsonFileRecordStore(self.tmp.name)
        self.store = DataStore(self.records)

    def tearDown(self):
        self.tmp.cleanup()

    def test_defaults(self):
        settings = settings_service.get_settings(self.store)
        self.assertEqual(settings.store_name, "My Grocery Store")
        self.assertEqual(settings.tax_rate, Decimal("5.0"))
        self.assertEqual(settings.currency_symbol, "$")
        self.assertEqual(settings.low_stock_threshold, 10)

    def test_update_persists(self):
        settings_service.update_settings(self.store, {"store_name": "Corner Shop", "tax_rate": Decimal("8.25")})

        reloaded = DataStore(self.records)
        self.assertEqual(reloaded.settings.store_name, "Corner Shop")
        self.assertEqual(reloaded.settings.tax_rate, Decimal("8.25"))
        self.assertEqual(reloaded.settings.low_stock_threshold, 10)
        self.assertEqual(self.records.load("settings")["taxRate"], "8.25")

    def test_unknown_setting_rejected(self):
        with self.assertRaises(SettingsError):
            settings_service.update_settings(self.store, {"theme": "dark"})
        self.assertEqual(self.store.settings.store_name, "My Grocery Store")

    def test_threshold_change_recomputes_low_stock(self):
        catalog_service.add_product(self.store, Product(name="Flour", category_id=1, quantity=8))
        self.assertTrue(self.store.find_product(1).is_low_stock)

        settings_service.update_settings(self.store, {"low_stock_threshold": 5})
        self.assertFalse(self.store.find_product(1).is_low_stock)

    def test_save_settings_notifies(self):
        topics = []
        self.store.subscribe(topics.append)
        settings = settings_service.get_settings(self.store)
        settings_service.save_settings(self.store, settings)
        self.assertEqual(topics, ["settings"])

    def test_new_tax_rate_applies_to_later_sales(self):
        from grocer.services import sales_service

        catalog_service.add_product(self.store, Product(name="Rice", category_id=1, price=Decimal("10.00"), quantity=5))
        settings_service.update_settings(self.store, {"tax_rate": Decimal("0")})
        transaction = sales_service.record_sale(self.store, [{"product_id": 1, "quantity": 1}])
        self.assertEqual(transaction.total_amount, Decimal("10.00"))


if __name__ == "__main__":
    unittest.main()
