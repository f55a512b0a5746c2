import io
from datetime import date, datetime
from decimal import Decimal

import pytest

from grocer.models import Transaction, TransactionItem
from grocer.services import export_service, sales_service


def _transaction(id_, when, sub_total, tax, total, items=1):
    return Transaction(
        id=id_,
        date=when,
        items=[TransactionItem(1, "Milk", 1, Decimal(sub_total), Decimal(sub_total)) for _ in range(items)],
        sub_total=Decimal(sub_total),
        tax_amount=Decimal(tax),
        total_amount=Decimal(total),
    )


@pytest.mark.reports
class TestCsvExport:
    def test_header_and_rows(self):
        """
        SCENARIO: one transaction with sub-cent tax
        EXPECTED: amounts rounded half-up to two places, date to the minute
        """
        stream = io.StringIO()
        count = export_service.export_transactions_csv(
            [_transaction(7, datetime(2024, 3, 5, 14, 7, 33), "7.50", "0.375", "7.875", items=2)],
            stream,
        )

        assert count == 1
        assert stream.getvalue().splitlines() == [
            "Transaction ID,Date,Items,SubTotal,Tax,Total",
            "7,2024-03-05 14:07,2,7.50,0.38,7.88",
        ]

    def test_empty_report_has_header_only(self):
        assert export_service.transactions_csv_text([]) == "Transaction ID,Date,Items,SubTotal,Tax,Total\n"

    def test_report_filename(self):
        assert export_service.report_filename(date(2024, 1, 1), datetime(2024, 1, 31, 17, 0)) == (
            "SalesReport_20240101_20240131.csv"
        )

    def test_export_report_writes_file(self, store, make_product, tmp_path):
        make_product(price="2.00", quantity=10)
        sales_service.record_sale(store, [{"product_id": 1, "quantity": 2}], now=datetime(2024, 2, 10, 12, 0))
        sales_service.record_sale(store, [{"product_id": 1, "quantity": 1}], now=datetime(2024, 3, 10, 12, 0))

        path = export_service.export_report(store, date(2024, 2, 1), date(2024, 2, 29), tmp_path / "out")

        assert path.name == "SalesReport_20240201_20240229.csv"
        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines == [
            "Transaction ID,Date,Items,SubTotal,Tax,Total",
            "1,2024-02-10 12:00,1,4.00,0.20,4.20",
        ]
