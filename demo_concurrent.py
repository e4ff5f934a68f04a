import asyncio

import httpx

from sdk.posclient import PosClient, cart_total, line_item


async def simulate_sale(client, cashier, product, qty):
    items = [line_item(product, qty)]
    try:
        page = await client.submit_sale_async(items, cart_total(items))
        print(f"{cashier}: [{page['message_type']}] {page['message']}")
    except httpx.HTTPStatusError as e:
        print(f"❌ {cashier} sale failed with HTTP {e.response.status_code}")
    except httpx.HTTPError as e:
        print(f"❌ {cashier} could not reach the server: {e}")


async def main():
    c = PosClient(base_url="http://127.0.0.1:8085")

    c.add_product("Cardamom", 9000.0, "kg", 2, "spices")
    product = next(p for p in c.list_products() if p["name"] == "Cardamom")
    print(f"\n🌿 Product: {product}")

    before = c.daily_report()["number_of_sales"]

    # Both cashiers sell the last 2 kg; stock is not re-checked, so both sales
    # are kept and the stock clamps at zero.
    print("\n⚡ Simulating concurrent sales...")
    await asyncio.gather(
        simulate_sale(c, "counter-1", product, 2),
        simulate_sale(c, "counter-2", product, 2),
    )

    print("\n📦 Final product state:", c.get_product(product["id"]))
    print("🧾 Sales recorded:", c.daily_report()["number_of_sales"] - before)


if __name__ == "__main__":
    asyncio.run(main())
