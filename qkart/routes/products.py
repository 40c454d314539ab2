from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from shared.utils import SuccessResponse, NotFoundException
from qkart.deps import get_db, require_admin
from qkart.models import ProductDB
from qkart.schemas import ProductCreate, ProductResponse, ProductListResponse
from qkart.services import product_service

router = APIRouter()


@router.get("", response_model=SuccessResponse[ProductListResponse])
async def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db=Depends(get_db),
):
    products, total = await product_service.get_products(db, category, search, page, limit)
    return SuccessResponse(data=ProductListResponse(
        products=[ProductResponse(**p.dict()) for p in products],
        total=total,
        page=page,
        limit=limit
    ))


@router.get("/{product_id}", response_model=SuccessResponse[ProductResponse])
async def get_product(product_id: str, db=Depends(get_db)):
    product = await product_service.get_product_by_id(db, product_id)
    if not product:
        raise NotFoundException("Product not found")
    return SuccessResponse(data=ProductResponse(**product.dict()))


@router.post("", response_model=SuccessResponse[ProductResponse], status_code=status.HTTP_201_CREATED)
async def create_product(product: ProductCreate, admin=Depends(require_admin), db=Depends(get_db)):
    created: ProductDB = await product_service.create_product(db, product)
    return SuccessResponse(data=ProductResponse(**created.dict()), message="Product created successfully")
