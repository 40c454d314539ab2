from fastapi import APIRouter, Depends, Path, Response, status

from shared.utils import SuccessResponse, settings
from shared.security_config import OBJECT_ID_PATTERN
from qkart.deps import get_db, get_current_user
from qkart.models import CartDB, UserDB
from qkart.schemas import CartItemAdd, CartItemUpdate, CartResponse, CartItemResponse, ProductResponse
from qkart.services import cart_service

router = APIRouter()


def to_cart_response(cart: CartDB) -> CartResponse:
    return CartResponse(
        email=cart.email,
        cart_items=[
            CartItemResponse(product=ProductResponse(**item.product.dict()), quantity=item.quantity)
            for item in cart.cart_items
        ],
        payment_option=cart.payment_option,
        total=float(cart_service.cart_total(cart)),
    )


@router.get("", response_model=SuccessResponse[CartResponse])
async def get_cart(user: UserDB = Depends(get_current_user), db=Depends(get_db)):
    cart = await cart_service.get_cart_by_user(db, user)
    return SuccessResponse(data=to_cart_response(cart))


@router.post("", response_model=SuccessResponse[CartResponse], status_code=status.HTTP_201_CREATED)
async def add_product_to_cart(item: CartItemAdd, user: UserDB = Depends(get_current_user), db=Depends(get_db)):
    cart = await cart_service.add_product_to_cart(
        db, user, item.product_id, item.quantity, settings.DEFAULT_PAYMENT_OPTION
    )
    return SuccessResponse(data=to_cart_response(cart), message="Product added to cart")


@router.put("/checkout", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def checkout(user: UserDB = Depends(get_current_user), db=Depends(get_db)):
    await cart_service.checkout(db, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("", response_model=SuccessResponse[CartResponse])
async def update_product_in_cart(item: CartItemUpdate, user: UserDB = Depends(get_current_user), db=Depends(get_db)):
    if item.quantity == 0:
        await cart_service.delete_product_from_cart(
            db, user, item.product_id, missing_cart_message=cart_service.NO_CART_FOR_UPDATE
        )
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    cart = await cart_service.update_product_in_cart(db, user, item.product_id, item.quantity)
    return SuccessResponse(data=to_cart_response(cart))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_product_from_cart(
    product_id: str = Path(..., pattern=OBJECT_ID_PATTERN),
    user: UserDB = Depends(get_current_user),
    db=Depends(get_db),
):
    await cart_service.delete_product_from_cart(db, user, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
