from typing import Optional, Union
from fastapi import APIRouter, Depends, Path, Query

from shared.utils import SuccessResponse, NotFoundException, ForbiddenException
from shared.security_config import OBJECT_ID_PATTERN
from qkart.deps import get_db, get_current_user
from qkart.models import UserDB
from qkart.schemas import UserResponse, AddressUpdate, AddressResponse
from qkart.services import user_service

router = APIRouter()


def _check_owner(user_id: str, user: UserDB):
    if user_id.lower() != user.id:
        raise ForbiddenException()


@router.get("/{user_id}", response_model=SuccessResponse[Union[UserResponse, AddressResponse]])
async def get_user(
    user_id: str = Path(..., pattern=OBJECT_ID_PATTERN),
    q: Optional[str] = Query(None),
    user: UserDB = Depends(get_current_user),
    db=Depends(get_db),
):
    _check_owner(user_id, user)

    if q == "address":
        address = await user_service.get_user_address_by_id(db, user_id)
        if not address:
            raise NotFoundException("User not found")
        return SuccessResponse(data=AddressResponse(**address))

    found = await user_service.get_user_by_id(db, user_id)
    if not found:
        raise NotFoundException("User not found")
    return SuccessResponse(data=UserResponse(**found.dict()))


@router.put("/{user_id}", response_model=SuccessResponse[AddressResponse])
async def set_address(
    body: AddressUpdate,
    user_id: str = Path(..., pattern=OBJECT_ID_PATTERN),
    user: UserDB = Depends(get_current_user),
    db=Depends(get_db),
):
    _check_owner(user_id, user)
    address = await user_service.set_address(db, user, body.address)
    return SuccessResponse(data=AddressResponse(address=address), message="Address updated successfully")
