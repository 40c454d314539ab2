from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator

from shared.utils import settings


class MongoModel(BaseModel):
    """Base for stored documents: ``_id`` is exposed as a string ``id``."""

    id: Optional[str] = Field(None, alias="_id")

    @field_validator("id", mode="before")
    def stringify_id(cls, v):
        return str(v) if v is not None else v

    class Config:
        populate_by_name = True


def to_document(model: BaseModel, exclude: Optional[set] = None) -> dict:
    """Dump a model for Mongo, turning Decimals into floats at any depth."""
    return _encode(model.dict(by_alias=True, exclude=exclude))


def _encode(value):
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_encode(v) for v in value]
    return value


class UserDB(MongoModel):
    name: str
    email: str
    password: str
    wallet_money: Decimal = Decimal(str(settings.DEFAULT_WALLET_MONEY))
    address: str = settings.DEFAULT_ADDRESS
    role: str = "user"
    created_at: datetime = Field(default_factory=datetime.utcnow)

    def has_set_non_default_address(self) -> bool:
        return self.address != settings.DEFAULT_ADDRESS


class ProductDB(MongoModel):
    name: str
    category: str
    cost: Decimal
    rating: int = 0
    image: Optional[str] = None
    description: Optional[str] = None


class CartItemDB(BaseModel):
    # Copy of the product as it was when added, not a reference
    product: ProductDB
    quantity: int


class CartDB(MongoModel):
    email: str
    cart_items: List[CartItemDB] = []
    payment_option: str

    def find_item_index(self, product_id: str) -> int:
        # Stored ids are lowercase hex; callers may pass either case
        for index, item in enumerate(self.cart_items):
            if item.product.id == product_id.lower():
                return index
        return -1
