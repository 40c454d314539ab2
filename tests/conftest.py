import pytest
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from shared.utils import get_password_hash, settings
from shared.security_config import limiter
from qkart.main import create_app
from qkart.models import UserDB, ProductDB, to_document
from qkart.services import token_service

PASSWORD = "password123"
HOME_ADDRESS = "221B Baker Street, London, NW1 6XE"


@pytest.fixture
def db():
    """Fresh in-memory database for every test."""
    return AsyncMongoMockClient()["qkart_test"]


@pytest.fixture
def app(db):
    limiter.enabled = False
    limiter.reset()
    app = create_app()
    app.mongodb = db
    yield app
    limiter.enabled = True


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def make_user(db):
    async def _make_user(email="crio-user@gmail.com", address=settings.DEFAULT_ADDRESS, wallet_money=500, role="user"):
        user = UserDB(
            name="crio-user",
            email=email,
            password=get_password_hash(PASSWORD),
            wallet_money=wallet_money,
            address=address,
            role=role,
        )
        result = await db.users.insert_one(to_document(user, exclude={"id"}))
        user.id = str(result.inserted_id)
        return user
    return _make_user


@pytest.fixture
def make_product(db):
    async def _make_product(name="UNIFACTOR Mens Running Shoes", cost=100, category="Fashion"):
        product = ProductDB(name=name, cost=cost, category=category, rating=5, image="https://i.imgur.com/lulqWzW.jpg")
        result = await db.products.insert_one(to_document(product, exclude={"id"}))
        product.id = str(result.inserted_id)
        return product
    return _make_product


@pytest.fixture
async def user(make_user):
    return await make_user()


@pytest.fixture
async def user_with_address(make_user):
    return await make_user(email="crio-buyer@gmail.com", address=HOME_ADDRESS)


@pytest.fixture
async def product(make_product):
    return await make_product()


def auth_headers(user):
    token = token_service.generate_auth_tokens(user).access_token
    return {"Authorization": f"Bearer {token}"}
