# tests/test_sale_processing.py
import json

from spicepos.logic import process_sale_logic


def add_product(client, name="Cinnamon", price=2400.0, stock=5, unit="kg"):
    r = client.post("/manage_product", data={
        "action": "add", "name": name, "category": "spices",
        "price_lkr": str(price), "unit": unit, "stock": str(stock),
    })
    assert r.json()["message_type"] == "success"
    return next(p for p in r.json()["products"] if p["name"] == name)


def sell(client, product, quantity, total=None):
    items = [{
        "product_id": product["id"],
        "name": product["name"],
        "unit": product["unit"],
        "price_at_sale_lkr": product["price_lkr"],
        "quantity": quantity,
    }]
    if total is None:
        total = product["price_lkr"] * quantity
    return client.post("/process_sale", data={"cart_data": json.dumps(items), "cart_total": str(total)})


def test_sale_deducts_stock_and_clamps_at_zero(client):
    p = add_product(client, stock=5)

    r = sell(client, p, 3)
    assert r.status_code == 200
    assert r.json()["message"] == "Sale recorded successfully!"
    assert r.json()["message_type"] == "success"
    assert client.get(f"/products/{p['id']}").json()["stock"] == 2

    r = sell(client, p, 4)
    assert r.json()["message_type"] == "success"
    assert client.get(f"/products/{p['id']}").json()["stock"] == 0


def test_redirects_back_to_sale_page(client):
    p = add_product(client)
    r = sell(client, p, 1)
    assert r.history and r.history[0].status_code == 303
    assert r.url.path == "/"


def test_non_positive_total_is_rejected(client, sales_store):
    p = add_product(client, stock=5)

    for total in (0, -10, "abc", "nan"):
        r = sell(client, p, 1, total=total)
        assert r.json()["message_type"] == "error"
        assert "Invalid cart total amount." in r.json()["message"]

    assert sales_store.get_all() == []
    assert client.get(f"/products/{p['id']}").json()["stock"] == 5


def test_bad_cart_data_is_rejected(client, sales_store):
    r = client.post("/process_sale", data={"cart_data": "{oops", "cart_total": "10"})
    assert r.json()["message"].startswith("Could not process sale due to errors:")
    assert "Invalid cart data received." in r.json()["message"]

    r = client.post("/process_sale", data={"cart_data": "[" * 100000 + "]" * 100000, "cart_total": "10"})
    assert r.status_code == 200
    assert r.json()["message_type"] == "error"
    assert "Invalid cart data received." in r.json()["message"]

    r = client.post("/process_sale", data={"cart_data": "[]", "cart_total": "10"})
    assert "Cart is empty or data is corrupted." in r.json()["message"]

    r = client.post("/process_sale", data={"cart_data": json.dumps([{"product_id": "p1"}]), "cart_total": "10"})
    assert "Cart is empty or data is corrupted." in r.json()["message"]

    assert sales_store.get_all() == []


def test_unknown_product_keeps_sale_with_warning(client, sales_store):
    p = add_product(client, stock=5)
    ghost = dict(p, id="prod_deleted")

    items = [
        {"product_id": ghost["id"], "name": "Ghost", "unit": "kg", "price_at_sale_lkr": 10.0, "quantity": 1},
        {"product_id": p["id"], "name": p["name"], "unit": "kg", "price_at_sale_lkr": p["price_lkr"], "quantity": 2},
    ]
    r = client.post("/process_sale", data={"cart_data": json.dumps(items), "cart_total": "4810"})

    assert r.json()["message_type"] == "warning"
    assert "issue updating stock levels" in r.json()["message"]
    assert len(sales_store.get_all()) == 1
    # the remaining line item is still deducted
    assert client.get(f"/products/{p['id']}").json()["stock"] == 3


def test_line_items_are_captured_by_value(client, sales_store):
    p = add_product(client, name="Cloves", price=300.0, stock=10)
    sell(client, p, 2)

    client.post("/manage_product", data={"action": "edit", "product_id": p["id"], "name": "Cloves (whole)", "price_lkr": "450"})
    client.post("/manage_product", data={"action": "delete", "product_id": p["id"]})

    [sale] = sales_store.get_all()
    assert sale.items[0].name == "Cloves"
    assert sale.items[0].price_at_sale_lkr == 300.0
    assert sale.total_lkr == 600.0


def test_failed_sale_write_leaves_stock_alone(product_store, sales_store, monkeypatch):
    from spicepos.core import ProductIn

    p = product_store.add(ProductIn(name="Mace", price_lkr=100, unit="g", stock=5))
    monkeypatch.setattr(sales_store, "record_sale", lambda items, total: None)

    cart = json.dumps([{"product_id": p.id, "name": "Mace", "unit": "g", "price_at_sale_lkr": 100, "quantity": 2}])
    flash = process_sale_logic(sales_store, product_store, cart, "200")

    assert flash.message_type == "error"
    assert flash.message == "Failed to record the sale. Please try again."
    assert product_store.get_by_id(p.id).stock == 5


def test_get_on_process_sale_is_refused(client):
    r = client.get("/process_sale")
    assert r.json()["message"] == "Invalid access method."
    assert r.json()["message_type"] == "error"
