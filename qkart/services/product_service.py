import re
from typing import Optional, List, Tuple
from bson import ObjectId

from qkart.models import ProductDB, to_document
from qkart.schemas import ProductCreate


async def get_product_by_id(db, product_id: str) -> Optional[ProductDB]:
    if not ObjectId.is_valid(product_id):
        return None
    doc = await db.products.find_one({"_id": ObjectId(product_id)})
    return ProductDB(**doc) if doc else None


async def get_products(
    db,
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[ProductDB], int]:
    query = {}
    if category:
        query["category"] = category
    if search:
        query["name"] = {"$regex": re.escape(search), "$options": "i"}

    skip = (page - 1) * limit
    total = await db.products.count_documents(query)
    cursor = db.products.find(query).skip(skip).limit(limit)
    products = [ProductDB(**doc) for doc in await cursor.to_list(length=limit)]
    return products, total


async def create_product(db, product: ProductCreate) -> ProductDB:
    product_db = ProductDB(**product.dict())
    result = await db.products.insert_one(to_document(product_db, exclude={"id"}))
    product_db.id = str(result.inserted_id)
    return product_db
