import logging

from shared.utils import verify_password, UnauthorizedException
from qkart.models import UserDB
from qkart.services import user_service

logger = logging.getLogger(__name__)


async def login_user_with_email_and_password(db, email: str, password: str) -> UserDB:
    user = await user_service.get_user_by_email(db, email)
    if not user or not verify_password(password, user.password):
        logger.warning("Failed login", extra={"email": email})
        raise UnauthorizedException("Incorrect email or password")
    return user
