from bson import ObjectId

from conftest import HOME_ADDRESS, auth_headers


async def test_get_own_profile(client, user):
    resp = await client.get(f"/v1/users/{user.id}", headers=auth_headers(user))

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["id"] == user.id
    assert data["email"] == user.email
    assert data["wallet_money"] == 500
    assert "password" not in data


async def test_get_address_only(client, user):
    resp = await client.get(f"/v1/users/{user.id}", params={"q": "address"}, headers=auth_headers(user))

    assert resp.status_code == 200
    assert resp.json()["data"] == {"address": "ADDRESS_NOT_SET"}


async def test_other_users_profile_is_forbidden(client, user, make_user):
    other = await make_user(email="someone-else@gmail.com")

    resp = await client.get(f"/v1/users/{other.id}", headers=auth_headers(user))

    assert resp.status_code == 403
    assert resp.json()["error"] == "User not authorized to access this resource"


async def test_invalid_user_id_is_rejected(client, user):
    resp = await client.get("/v1/users/not-an-object-id", headers=auth_headers(user))
    assert resp.status_code == 400


async def test_profile_requires_auth(client, user):
    resp = await client.get(f"/v1/users/{user.id}")
    assert resp.status_code == 401


async def test_set_address(client, db, user):
    resp = await client.put(
        f"/v1/users/{user.id}",
        json={"address": HOME_ADDRESS},
        headers=auth_headers(user),
    )

    assert resp.status_code == 200
    assert resp.json()["data"] == {"address": HOME_ADDRESS}
    stored = await db.users.find_one({"_id": ObjectId(user.id)})
    assert stored["address"] == HOME_ADDRESS


async def test_short_address_is_rejected(client, user):
    resp = await client.put(
        f"/v1/users/{user.id}",
        json={"address": "too short"},
        headers=auth_headers(user),
    )
    assert resp.status_code == 400


async def test_set_address_for_other_user_is_forbidden(client, user, make_user):
    other = await make_user(email="someone-else@gmail.com")

    resp = await client.put(
        f"/v1/users/{other.id}",
        json={"address": HOME_ADDRESS},
        headers=auth_headers(user),
    )
    assert resp.status_code == 403


async def test_own_profile_by_uppercase_id(client, user):
    resp = await client.get(f"/v1/users/{user.id.upper()}", headers=auth_headers(user))

    assert resp.status_code == 200
    assert resp.json()["data"]["email"] == user.email
