# sdk/posclient.py
import json
import requests
import httpx
from typing import Any, Dict, List, Optional
from rich import print


class PosClient:
    """
    Thin client for the spice-pos web surface.

    Form endpoints answer with a redirect; the client follows it and returns
    the page the redirect lands on, which carries the flash message.
    """

    def __init__(self, base_url: str = "http://localhost:8085", timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.timeout = timeout

    # Products
    def sale_page(self):
        r = self.session.get(f"{self.base_url}/", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def list_products(self) -> List[Dict[str, Any]]:
        return self.products_page()["products"]

    def products_page(self, edit_id: Optional[str] = None):
        params = {"action": "edit", "id": edit_id} if edit_id else {}
        r = self.session.get(f"{self.base_url}/products", params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def get_product(self, product_id: str):
        r = self.session.get(f"{self.base_url}/products/{product_id}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def _manage(self, form: Dict[str, Any]):
        r = self.session.post(f"{self.base_url}/manage_product", data=form, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def add_product(self, name: str, price_lkr: float, unit: str, stock: float, category: str = ""):
        return self._manage({
            "action": "add", "name": name, "category": category,
            "price_lkr": price_lkr, "unit": unit, "stock": stock,
        })

    def update_product(self, product_id: str, **fields):
        form = {"action": "edit", "product_id": product_id}
        form.update({k: v for k, v in fields.items() if v is not None})
        return self._manage(form)

    def delete_product(self, product_id: str):
        return self._manage({"action": "delete", "product_id": product_id})

    # Sales
    @staticmethod
    def _sale_form(items: List[Dict[str, Any]], total: float) -> Dict[str, str]:
        return {"cart_data": json.dumps(items), "cart_total": str(total)}

    def submit_sale(self, items: List[Dict[str, Any]], total: float):
        r = self.session.post(f"{self.base_url}/process_sale", data=self._sale_form(items, total), timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    async def submit_sale_async(self, items: List[Dict[str, Any]], total: float):
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            r = await client.post(f"{self.base_url}/process_sale", data=self._sale_form(items, total))
            r.raise_for_status()
            return r.json()

    # Reports
    def daily_report(self, date: Optional[str] = None):
        params = {"date": date} if date else {}
        r = self.session.get(f"{self.base_url}/reports", params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()


def line_item(product: Dict[str, Any], quantity: float) -> Dict[str, Any]:
    """Capture a product as a cart line item at its current price."""
    return {
        "product_id": product["id"],
        "name": product["name"],
        "unit": product["unit"],
        "price_at_sale_lkr": product["price_lkr"],
        "quantity": quantity,
    }


def cart_total(items: List[Dict[str, Any]]) -> float:
    return round(sum(it["price_at_sale_lkr"] * it["quantity"] for it in items), 2)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="spice-pos client")
    parser.add_argument("--base-url", default="http://127.0.0.1:8085")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---------------------------
    # Product commands
    # ---------------------------
    subparsers.add_parser("list-products", help="List all products")

    gp = subparsers.add_parser("get-product", help="Get a product by its ID")
    gp.add_argument("--product-id", required=True, help="ID of the product")

    ap = subparsers.add_parser("add-product", help="Add a new product")
    ap.add_argument("--name", required=True, help="Product name")
    ap.add_argument("--price", type=float, required=True, help="Unit price in LKR")
    ap.add_argument("--unit", required=True, help="Unit label, e.g. kg or pack")
    ap.add_argument("--stock", type=float, required=True, help="Quantity in stock")
    ap.add_argument("--category", default="", help="Product category")

    ep = subparsers.add_parser("edit-product", help="Edit an existing product")
    ep.add_argument("--product-id", required=True)
    ep.add_argument("--name")
    ep.add_argument("--price", type=float)
    ep.add_argument("--unit")
    ep.add_argument("--stock", type=float)
    ep.add_argument("--category")

    dp = subparsers.add_parser("delete-product", help="Delete a product")
    dp.add_argument("--product-id", required=True)

    # ---------------------------
    # Sale commands
    # ---------------------------
    sp = subparsers.add_parser("sell", help="Record a sale of a single product")
    sp.add_argument("--product-id", required=True)
    sp.add_argument("--qty", type=float, required=True)

    rp = subparsers.add_parser("report", help="Daily sales report")
    rp.add_argument("--date", help="YYYY-MM-DD, defaults to today")

    # ---------------------------
    # Parse and execute
    # ---------------------------
    args = parser.parse_args()
    c = PosClient(base_url=args.base_url)

    if args.command == "list-products":
        print(c.list_products())

    elif args.command == "get-product":
        print(c.get_product(args.product_id))

    elif args.command == "add-product":
        print(c.add_product(args.name, args.price, args.unit, args.stock, args.category))

    elif args.command == "edit-product":
        print(c.update_product(
            args.product_id, name=args.name, price_lkr=args.price,
            unit=args.unit, stock=args.stock, category=args.category,
        ))

    elif args.command == "delete-product":
        print(c.delete_product(args.product_id))

    elif args.command == "sell":
        items = [line_item(c.get_product(args.product_id), args.qty)]
        page = c.submit_sale(items, cart_total(items))
        print({"message": page["message"], "message_type": page["message_type"]})

    elif args.command == "report":
        print(c.daily_report(args.date))
