from typing import Optional
from fastapi import Depends, Header, Request

from shared.utils import UnauthorizedException, ForbiddenException
from qkart.models import UserDB
from qkart.services import token_service, user_service


def get_db(request: Request):
    return request.app.mongodb


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    db=Depends(get_db),
) -> UserDB:
    if not authorization:
        raise UnauthorizedException()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise UnauthorizedException()

    payload = token_service.verify_access_token(token)
    user = await user_service.get_user_by_id(db, payload["sub"])
    if not user:
        raise UnauthorizedException()

    request.state.user_id = user.id
    return user


async def require_admin(user: UserDB = Depends(get_current_user)) -> UserDB:
    if user.role != "admin":
        raise ForbiddenException("Only admins can perform this action")
    return user
