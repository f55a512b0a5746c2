# Overview: Pytest coverage for the json-file and SQL record stores.

from decimal import Decimal

import pytest
import sqlalchemy as sa

from grocer.services.record_store import (
    JsonFileRecordStore,
    RecordStoreError,
    SqlRecordStore,
    create_record_store,
)


class TestJsonFileRecordStore:
    def test_missing_record_loads_none(self, records):
        assert records.load("products") is None

    def test_save_then_load(self, records):
        assert records.save("categories", [{"id": 1, "name": "Beverages"}]) is True
        assert records.load("categories") == [{"id": 1, "name": "Beverages"}]
        assert records.path_for("categories").exists()

    def test_fraction_literals_load_as_decimal(self, records):
        """Older files may store amounts as JSON numbers."""
        records.path_for("settings").write_text('{"taxRate": 7.25}', encoding="utf-8")
        value = records.load("settings")["taxRate"]
        assert isinstance(value, Decimal)
        assert value == Decimal("7.25")

    def test_malformed_file_loads_none(self, records):
        records.path_for("products").write_text("[{not json", encoding="utf-8")
        assert records.load("products") is None

    def test_failed_save_keeps_previous_content(self, records):
        """
        SCENARIO: a value that cannot be serialized is saved over a good record
        EXPECTED: save reports False, the old file is intact and no temp file is left
        """
        records.save("products", [{"id": 1}])
        assert records.save("products", [{"id": object()}]) is False
        assert records.load("products") == [{"id": 1}]
        assert [p.name for p in records.directory.iterdir()] == ["products.json"]

    def test_delete(self, records):
        records.save("pending_sale", {"x": 1})
        assert records.delete("pending_sale") is True
        assert records.load("pending_sale") is None
        assert records.delete("pending_sale") is True


class TestSqlRecordStore:
    @pytest.fixture()
    def sql_records(self):
        return SqlRecordStore(engine=sa.create_engine("sqlite://"))

    def test_save_load_and_overwrite(self, sql_records):
        assert sql_records.save("settings", {"storeName": "A"}) is True
        assert sql_records.save("settings", {"storeName": "B"}) is True
        assert sql_records.load("settings") == {"storeName": "B"}

    def test_missing_record_loads_none(self, sql_records):
        assert sql_records.load("transactions") is None

    def test_save_many_is_all_or_nothing(self, sql_records):
        """
        SCENARIO: the second of two records cannot be serialized
        EXPECTED: neither record is written
        """
        ok = sql_records.save_many({
            "transactions": [{"id": 1}],
            "products": [{"id": object()}],
        })
        assert ok is False
        assert sql_records.load("transactions") is None
        assert sql_records.load("products") is None

    def test_delete(self, sql_records):
        sql_records.save("pending_sale", {"x": 1})
        assert sql_records.delete("pending_sale") is True
        assert sql_records.load("pending_sale") is None

    def test_requires_url_or_engine(self):
        with pytest.raises(RecordStoreError):
            SqlRecordStore()


class TestCreateRecordStore:
    def test_json_backend(self, tmp_path):
        store = create_record_store("json", data_dir=tmp_path / "d")
        assert isinstance(store, JsonFileRecordStore)
        assert (tmp_path / "d").is_dir()

    def test_sql_backend_defaults_to_sqlite_file(self, tmp_path):
        store = create_record_store("sql", data_dir=tmp_path)
        assert isinstance(store, SqlRecordStore)
        store.save("settings", {"storeName": "X"})
        assert (tmp_path / "grocer.sqlite3").exists()

    def test_unknown_backend(self, tmp_path):
        with pytest.raises(RecordStoreError):
            create_record_store("mongo", data_dir=tmp_path)
