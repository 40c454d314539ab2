import logging
from typing import Optional
from bson import ObjectId

from shared.utils import get_password_hash, settings, BadRequestException
from qkart.models import UserDB, to_document
from qkart.schemas import UserRegister

logger = logging.getLogger(__name__)


async def get_user_by_id(db, user_id: str) -> Optional[UserDB]:
    if not ObjectId.is_valid(user_id):
        return None
    doc = await db.users.find_one({"_id": ObjectId(user_id)})
    return UserDB(**doc) if doc else None


async def get_user_by_email(db, email: str) -> Optional[UserDB]:
    doc = await db.users.find_one({"email": email.lower()})
    return UserDB(**doc) if doc else None


async def is_email_taken(db, email: str) -> bool:
    return await db.users.find_one({"email": email.lower()}, {"_id": 1}) is not None


async def create_user(db, user: UserRegister) -> UserDB:
    if await is_email_taken(db, user.email):
        raise BadRequestException("Email already taken")

    user_db = UserDB(
        name=user.name,
        email=user.email,
        password=get_password_hash(user.password),
        address=settings.DEFAULT_ADDRESS,
    )
    result = await db.users.insert_one(to_document(user_db, exclude={"id"}))
    user_db.id = str(result.inserted_id)
    logger.info("User registered", extra={"user_id": user_db.id})
    return user_db


async def get_user_address_by_id(db, user_id: str) -> Optional[dict]:
    """Fetch only the address of a user."""
    if not ObjectId.is_valid(user_id):
        return None
    doc = await db.users.find_one({"_id": ObjectId(user_id)}, {"address": 1, "_id": 0})
    return doc


async def set_address(db, user: UserDB, new_address: str) -> str:
    await db.users.update_one(
        {"_id": ObjectId(user.id)},
        {"$set": {"address": new_address}}
    )
    user.address = new_address
    return user.address
