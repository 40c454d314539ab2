"""
API tests for the /v1/cart routes, from adding a product through checkout.
"""
from bson import ObjectId

from conftest import auth_headers


async def _add(client, user, product_id, quantity=1):
    return await client.post(
        "/v1/cart",
        json={"product_id": product_id, "quantity": quantity},
        headers=auth_headers(user),
    )


class TestCartRoutes:
    async def test_add_then_get(self, client, user, product):
        resp = await _add(client, user, product.id, 2)

        assert resp.status_code == 201
        cart = resp.json()["data"]
        assert cart["email"] == user.email
        assert cart["payment_option"] == "PAYMENT_OPTION_DEFAULT"
        assert cart["total"] == 200

        resp = await client.get("/v1/cart", headers=auth_headers(user))
        assert resp.status_code == 200
        items = resp.json()["data"]["cart_items"]
        assert len(items) == 1
        assert items[0]["product"]["id"] == product.id
        assert items[0]["quantity"] == 2

    async def test_get_without_cart(self, client, user):
        resp = await client.get("/v1/cart", headers=auth_headers(user))

        assert resp.status_code == 404
        assert resp.json()["error"] == "User does not have a cart"

    async def test_add_duplicate(self, client, user, product):
        await _add(client, user, product.id)

        resp = await _add(client, user, product.id)
        assert resp.status_code == 400

    async def test_add_unknown_product(self, client, user):
        resp = await _add(client, user, str(ObjectId()))

        assert resp.status_code == 400
        assert resp.json()["error"] == "Product doesn't exist in database"

    async def test_add_invalid_body(self, client, user, product):
        resp = await _add(client, user, "1234", 1)
        assert resp.status_code == 400

        resp = await _add(client, user, product.id, 0)
        assert resp.status_code == 400

    async def test_update_quantity(self, client, user, product):
        await _add(client, user, product.id)

        resp = await client.put(
            "/v1/cart",
            json={"product_id": product.id, "quantity": 5},
            headers=auth_headers(user),
        )

        assert resp.status_code == 200
        assert resp.json()["data"]["cart_items"][0]["quantity"] == 5

    async def test_update_to_zero_removes_product(self, client, user, product):
        await _add(client, user, product.id)

        resp = await client.put(
            "/v1/cart",
            json={"product_id": product.id, "quantity": 0},
            headers=auth_headers(user),
        )

        assert resp.status_code == 204
        resp = await client.get("/v1/cart", headers=auth_headers(user))
        assert resp.json()["data"]["cart_items"] == []

    async def test_delete_product(self, client, user, product):
        await _add(client, user, product.id)

        resp = await client.delete(f"/v1/cart/{product.id}", headers=auth_headers(user))
        assert resp.status_code == 204

        resp = await client.delete(f"/v1/cart/{product.id}", headers=auth_headers(user))
        assert resp.status_code == 400
        assert resp.json()["error"] == "Product not in cart"

    async def test_add_same_id_in_uppercase(self, client, user, product):
        await _add(client, user, product.id)

        resp = await _add(client, user, product.id.upper())
        assert resp.status_code == 400

        resp = await client.get("/v1/cart", headers=auth_headers(user))
        assert len(resp.json()["data"]["cart_items"]) == 1

        resp = await client.delete(f"/v1/cart/{product.id.upper()}", headers=auth_headers(user))
        assert resp.status_code == 204

    async def test_update_to_zero_without_cart(self, client, user, product):
        resp = await client.put(
            "/v1/cart",
            json={"product_id": product.id, "quantity": 0},
            headers=auth_headers(user),
        )

        assert resp.status_code == 400
        assert resp.json()["error"] == "User does not have a cart. Use POST to create cart and add a product"


class TestCheckoutRoute:
    async def test_checkout_success(self, client, db, user_with_address, product):
        await _add(client, user_with_address, product.id, 2)

        resp = await client.put("/v1/cart/checkout", headers=auth_headers(user_with_address))

        assert resp.status_code == 204
        stored = await db.users.find_one({"_id": ObjectId(user_with_address.id)})
        assert stored["wallet_money"] == 300
        resp = await client.get("/v1/cart", headers=auth_headers(user_with_address))
        assert resp.json()["data"]["cart_items"] == []

    async def test_checkout_without_address(self, client, user, product):
        await _add(client, user, product.id)

        resp = await client.put("/v1/cart/checkout", headers=auth_headers(user))

        assert resp.status_code == 400
        assert resp.json()["error"] == "Address is not set"

    async def test_checkout_without_cart(self, client, user_with_address):
        resp = await client.put("/v1/cart/checkout", headers=auth_headers(user_with_address))
        assert resp.status_code == 404

    async def test_checkout_insufficient_balance(self, client, db, user_with_address, make_product):
        expensive = await make_product(name="Laptop", cost=400)
        await _add(client, user_with_address, expensive.id, 2)

        resp = await client.put("/v1/cart/checkout", headers=auth_headers(user_with_address))

        assert resp.status_code == 400
        assert resp.json()["error"] == "User balance is not sufficient"
        stored = await db.users.find_one({"_id": ObjectId(user_with_address.id)})
        assert stored["wallet_money"] == 500
