import json

from spicepos.core import today
from spicepos.database import JsonFileStore


def _sale(sale_id, timestamp, total):
    return {
        "sale_id": sale_id,
        "timestamp": timestamp,
        "items": [{"product_id": "prod_1", "name": "Pepper", "unit": "kg", "price_at_sale_lkr": total, "quantity": 1}],
        "total_lkr": total,
    }


def test_report_for_requested_date(client, sales_store):
    sales_store.files.write_all([
        _sale("sale_a", "2025-04-16T10:30:00+05:30", 1500.0),
        _sale("sale_b", "2025-04-16T18:05:00+05:30", 499.5),
        _sale("sale_c", "2025-04-15T18:05:00+05:30", 20.0),
    ])

    body = client.get("/reports", params={"date": "2025-04-16"}).json()
    assert body["date"] == "2025-04-16"
    assert body["number_of_sales"] == 2
    assert body["total_revenue"] == 1999.5
    assert [s["sale_id"] for s in body["sales"]] == ["sale_a", "sale_b"]


def test_report_defaults_to_today(client, settings):
    items = [{"product_id": "prod_x", "name": "Ginger", "unit": "kg", "price_at_sale_lkr": 800, "quantity": 0.5}]
    client.post("/process_sale", data={"cart_data": json.dumps(items), "cart_total": "400"})

    body = client.get("/reports").json()
    assert body["date"] == today(settings.TIMEZONE)
    assert body["number_of_sales"] == 1
    assert body["total_revenue"] == 400


def test_report_with_malformed_date(client, sales_store):
    sales_store.files.write_all([_sale("sale_a", "2025-04-16T10:30:00+05:30", 10.0)])
    body = client.get("/reports", params={"date": "16/04/2025"}).json()
    assert body["number_of_sales"] == 0
    assert body["sales"] == []


def test_report_counts_and_lists_the_same_sales(client, sales_store, monkeypatch):
    sales_store.files.write_all([_sale("sale_a", "2025-04-16T10:30:00+05:30", 10.0)])

    reads = []
    original_read_all = JsonFileStore.read_all

    def counting_read_all(self):
        reads.append(self.path)
        return original_read_all(self)

    monkeypatch.setattr(JsonFileStore, "read_all", counting_read_all)

    body = client.get("/reports", params={"date": "2025-04-16"}).json()
    assert len(reads) == 1
    assert body["number_of_sales"] == len(body["sales"]) == 1
