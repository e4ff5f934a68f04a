# tests/test_concurrency.py
from concurrent.futures import ThreadPoolExecutor

from spicepos.core import ProductIn
from spicepos.database import JsonFileStore
from spicepos.inventory import ProductStore
from spicepos.models import LineItem
from spicepos.sales import SalesStore


def test_concurrent_stock_deductions_are_not_lost(settings, product_store):
    p = product_store.add(ProductIn(name="Saffron", price_lkr=50, unit="g", stock=40))

    def deduct(_):
        # a fresh store per call, like one request each
        store = ProductStore(JsonFileStore(settings.products_path, lock_timeout=10))
        return store.update_stock(p.id, -1)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(deduct, range(30)))

    assert all(results)
    assert product_store.get_by_id(p.id).stock == 10


def test_concurrent_sales_are_all_appended(settings, sales_store):
    item = LineItem(product_id="prod_1", name="Saffron", unit="g", price_at_sale_lkr=50, quantity=1)

    def record(_):
        store = SalesStore(JsonFileStore(settings.sales_path, lock_timeout=10), settings.TIMEZONE)
        return store.record_sale([item], 50.0)

    with ThreadPoolExecutor(max_workers=8) as pool:
        sales = list(pool.map(record, range(20)))

    assert all(s is not None for s in sales)
    recorded = sales_store.get_all()
    assert len(recorded) == 20
    assert {s.sale_id for s in recorded} == {s.sale_id for s in sales}


def test_oversold_last_units_clamp_to_zero(client, product_store):
    p = product_store.add(ProductIn(name="Vanilla", price_lkr=300, unit="pod", stock=2))
    cart = (
        '[{"product_id": "%s", "name": "Vanilla", "unit": "pod", "price_at_sale_lkr": 300, "quantity": 2}]' % p.id
    )

    for _ in range(2):
        r = client.post("/process_sale", data={"cart_data": cart, "cart_total": "600"})
        assert r.json()["message_type"] == "success"

    assert product_store.get_by_id(p.id).stock == 0
    assert client.get("/reports").json()["number_of_sales"] == 2
