#!/usr/bin/env python

from sdk.posclient import PosClient, cart_total, line_item


def main():
    c = PosClient(base_url="http://127.0.0.1:8085")

    # -----------------------------
    # Add products
    # -----------------------------
    print("Adding products...")
    print(c.add_product("Cinnamon Quills", 2400.0, "kg", 12, "spices")["message"])
    print(c.add_product("Black Pepper", 1800.0, "kg", 5, "spices")["message"])

    products = c.list_products()
    cinnamon = next(p for p in products if p["name"] == "Cinnamon Quills")
    pepper = next(p for p in products if p["name"] == "Black Pepper")
    print(products)

    # -----------------------------
    # Record a sale
    # -----------------------------
    print("\nSelling 1.5 kg cinnamon and 3 kg pepper...")
    items = [line_item(cinnamon, 1.5), line_item(pepper, 3)]
    page = c.submit_sale(items, cart_total(items))
    print(page["message_type"], "-", page["message"])
    print("Pepper stock now:", c.get_product(pepper["id"])["stock"])

    # -----------------------------
    # Overselling clamps stock at zero
    # -----------------------------
    print("\nSelling 4 kg pepper with only 2 kg left...")
    items = [line_item(pepper, 4)]
    print(c.submit_sale(items, cart_total(items))["message"])
    print("Pepper stock now:", c.get_product(pepper["id"])["stock"])

    # -----------------------------
    # Rejected cart
    # -----------------------------
    print("\nSubmitting a cart with a zero total...")
    print(c.submit_sale([line_item(cinnamon, 1)], 0)["message"])

    # -----------------------------
    # Edit then delete a product; the sale keeps its captured price
    # -----------------------------
    print("\nRepricing and deleting pepper...")
    print(c.update_product(pepper["id"], price_lkr=2000.0)["message"])
    print(c.delete_product(pepper["id"])["message"])

    # -----------------------------
    # Daily report
    # -----------------------------
    report = c.daily_report()
    print(f"\nReport for {report['date']}: {report['number_of_sales']} sales, "
          f"LKR {report['total_revenue']:.2f}")
    for sale in report["sales"]:
        print(" ", sale["sale_id"], [(it["name"], it["price_at_sale_lkr"]) for it in sale["items"]])


if __name__ == "__main__":
    main()
