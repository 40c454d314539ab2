"""Cart operations: fetch, add, update, delete and checkout.

Every mutation of a user's cart runs under that user's lock, so two requests
for the same user never interleave their read-then-write sequences inside
one process. The unique index on ``carts.email`` guards cart creation across
processes.
"""
import asyncio
import logging
import weakref
from decimal import Decimal
from bson import ObjectId
from pymongo.errors import PyMongoError

from shared.utils import BadRequestException, NotFoundException, InternalErrorException
from qkart.models import CartDB, CartItemDB, UserDB, to_document
from qkart.services import product_service

logger = logging.getLogger(__name__)


class UserLocks:
    """Lazily created ``asyncio.Lock`` per user email.

    Locks are held weakly and disappear once no coroutine is using them.
    """

    def __init__(self):
        self._locks = weakref.WeakValueDictionary()

    def for_user(self, email: str) -> asyncio.Lock:
        lock = self._locks.get(email)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[email] = lock
        return lock


user_locks = UserLocks()

NO_CART = "User does not have a cart"
NO_CART_FOR_UPDATE = "User does not have a cart. Use POST to create cart and add a product"


async def _find_cart(db, email: str):
    doc = await db.carts.find_one({"email": email})
    return CartDB(**doc) if doc else None


async def _save_cart_items(db, cart: CartDB):
    items = [to_document(item) for item in cart.cart_items]
    await db.carts.update_one({"email": cart.email}, {"$set": {"cart_items": items}})


def cart_total(cart: CartDB) -> Decimal:
    """Sum of snapshot cost times quantity over the cart's items."""
    return sum(
        (item.product.cost * item.quantity for item in cart.cart_items),
        Decimal(0),
    )


async def get_cart_by_user(db, user: UserDB) -> CartDB:
    cart = await _find_cart(db, user.email)
    if not cart:
        raise NotFoundException(NO_CART)
    return cart


async def add_product_to_cart(db, user: UserDB, product_id: str, quantity: int, payment_option: str) -> CartDB:
    """Add a product to the user's cart, creating the cart on first use.

    The stored item embeds a copy of the product, so later catalog edits do
    not change what is already in the cart.
    """
    async with user_locks.for_user(user.email):
        cart = await _find_cart(db, user.email)
        if not cart:
            cart = CartDB(email=user.email, cart_items=[], payment_option=payment_option)
            try:
                result = await db.carts.insert_one(to_document(cart, exclude={"id"}))
            except PyMongoError:
                logger.exception("Cart creation failed", extra={"email": user.email})
                raise InternalErrorException("User cart creation failed")
            cart.id = str(result.inserted_id)
            logger.info("Cart created", extra={"email": user.email})

        if cart.find_item_index(product_id) != -1:
            raise BadRequestException(
                "Product already in cart. Use the cart sidebar to update or remove product from cart"
            )

        product = await product_service.get_product_by_id(db, product_id)
        if not product:
            raise BadRequestException("Product doesn't exist in database")

        cart.cart_items.append(CartItemDB(product=product, quantity=quantity))
        await _save_cart_items(db, cart)
        return cart


async def update_product_in_cart(db, user: UserDB, product_id: str, quantity: int) -> CartDB:
    async with user_locks.for_user(user.email):
        cart = await _find_cart(db, user.email)
        if not cart:
            raise BadRequestException(NO_CART_FOR_UPDATE)

        product = await product_service.get_product_by_id(db, product_id)
        if not product:
            raise BadRequestException("Product doesn't exist in database")

        index = cart.find_item_index(product_id)
        if index == -1:
            raise BadRequestException("Product not in cart")

        cart.cart_items[index].quantity = quantity
        await _save_cart_items(db, cart)
        return cart


async def delete_product_from_cart(db, user: UserDB, product_id: str, missing_cart_message: str = NO_CART) -> None:
    async with user_locks.for_user(user.email):
        cart = await _find_cart(db, user.email)
        if not cart:
            raise BadRequestException(missing_cart_message)

        index = cart.find_item_index(product_id)
        if index == -1:
            raise BadRequestException("Product not in cart")

        del cart.cart_items[index]
        await _save_cart_items(db, cart)


async def checkout(db, user: UserDB) -> CartDB:
    """Pay for the cart from the user's wallet and empty it.

    The wallet debit and the cart clear are two separate writes. If the
    second fails the debit stays applied; the failure is logged with the
    amounts involved and the error propagates.
    """
    async with user_locks.for_user(user.email):
        cart = await _find_cart(db, user.email)
        if not cart:
            raise NotFoundException(NO_CART)

        if len(cart.cart_items) == 0:
            raise BadRequestException("User does not have item in cart")

        if not user.has_set_non_default_address():
            raise BadRequestException("Address is not set")

        total = cart_total(cart)
        if total > user.wallet_money:
            raise BadRequestException("User balance is not sufficient")

        # Conditional on the stored balance so a stale user object cannot overdraw
        result = await db.users.update_one(
            {"_id": ObjectId(user.id), "wallet_money": {"$gte": float(total)}},
            {"$inc": {"wallet_money": -float(total)}}
        )
        if result.modified_count == 0:
            raise BadRequestException("User balance is not sufficient")
        user.wallet_money = user.wallet_money - total

        cart.cart_items = []
        try:
            await _save_cart_items(db, cart)
        except PyMongoError:
            logger.error(
                "Cart not cleared after wallet debit",
                extra={"email": user.email, "total": str(total), "balance": str(user.wallet_money)},
                exc_info=True,
            )
            raise

        logger.info("Checkout completed", extra={"email": user.email, "total": str(total)})
        return cart
