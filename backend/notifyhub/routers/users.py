"""User API endpoints - a view over devices grouped by userId."""
from typing import List

from fastapi import APIRouter, Depends

from ..dependencies import get_user_view
from ..schemas.user import UserResponse, UserUpsertRequest, UserUpsertResponse
from ..services.user_view import UserView

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=List[UserResponse])
async def list_users(view: UserView = Depends(get_user_view)):
    """List every user that owns at least one device."""
    return await view.list_users()


@router.post("", response_model=UserUpsertResponse)
async def upsert_user(request: UserUpsertRequest, view: UserView = Depends(get_user_view)):
    """Create a user by registering its token, or update its devices."""
    result = await view.upsert_user(request.model_dump(by_alias=True, exclude_none=True))
    return UserUpsertResponse(
        success=True,
        message="User saved successfully",
        user_id=result["userId"],
        device_ids=result["deviceIds"],
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, view: UserView = Depends(get_user_view)):
    """Get a user summary."""
    return await view.get_user(user_id)


@router.get("/{user_id}/devices", response_model=List[dict])
async def get_user_devices(user_id: str, view: UserView = Depends(get_user_view)):
    """Get the devices owned by a user."""
    return await view.get_user_devices(user_id)
