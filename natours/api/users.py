"""
User API endpoints
Every route requires authentication; the /{user_id} management routes are admin-only.
"""

from fastapi import APIRouter, Depends, Request, Response, status

from natours.core.errors import ErrorResponseModel
from natours.dependencies.auth import get_current_user, restrict_to
from natours.dependencies.services import get_user_service
from natours.models.user import User
from natours.schemas.user import UserCreate, UserUpdate, UserUpdateMe
from natours.services.user import UserService
from natours.utils.responses import success

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/getMe", responses={404: {"model": ErrorResponseModel}})
async def get_me(
    service: UserService = Depends(get_user_service),
    user: User = Depends(get_current_user),
):
    """Profile of the logged-in user"""
    me = await service.get_me(user)
    return success(me)


@router.patch(
    "/updateMe",
    responses={400: {"model": ErrorResponseModel}, 404: {"model": ErrorResponseModel}},
)
async def update_me(
    data: UserUpdateMe,
    service: UserService = Depends(get_user_service),
    user: User = Depends(get_current_user),
):
    """Change the logged-in user's name and email"""
    updated = await service.update_me(user, data)
    return success(updated)


@router.delete(
    "/deleteMe",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponseModel}},
)
async def delete_me(
    service: UserService = Depends(get_user_service),
    user: User = Depends(get_current_user),
):
    """Deactivate the logged-in user's account"""
    await service.delete_me(user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", responses={403: {"model": ErrorResponseModel}})
async def list_users(
    request: Request,
    service: UserService = Depends(get_user_service),
    admin: User = Depends(restrict_to("admin")),
):
    users = await service.list_users(request.query_params)
    return success(users, results=len(users))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponseModel}, 403: {"model": ErrorResponseModel}},
)
async def create_user(
    user: UserCreate,
    service: UserService = Depends(get_user_service),
    admin: User = Depends(restrict_to("admin")),
):
    created = await service.create_user(user, created_by=admin.id)
    return success(created)


@router.get(
    "/{user_id}",
    responses={403: {"model": ErrorResponseModel}, 404: {"model": ErrorResponseModel}},
)
async def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
    admin: User = Depends(restrict_to("admin")),
):
    user = await service.get_user(user_id)
    return success(user)


@router.patch(
    "/{user_id}",
    responses={
        400: {"model": ErrorResponseModel},
        403: {"model": ErrorResponseModel},
        404: {"model": ErrorResponseModel},
    },
)
async def update_user(
    user_id: str,
    user: UserUpdate,
    service: UserService = Depends(get_user_service),
    admin: User = Depends(restrict_to("admin")),
):
    updated = await service.update_user(user_id, user, updated_by=admin.id)
    return success(updated)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponseModel}, 404: {"model": ErrorResponseModel}},
)
async def delete_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
    admin: User = Depends(restrict_to("admin")),
):
    await service.delete_user(user_id, deleted_by=admin.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
