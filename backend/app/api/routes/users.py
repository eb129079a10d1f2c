"""User Routes — minimal identity directory.

Invariants:
    - POST /users is open: the auth gateway provisions profiles before the first call
    - GET /users lists the directory (name, then email) to any identified caller
    - GET /users/me resolves the X-User-Id caller, 404 if no profile exists
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user_id
from app.infrastructure.database import get_db
from app.schemas.user import UserCreate, UserResponse, UserSummary
from app.services.user_directory import UserDirectory

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    return await UserDirectory(db).create_user(body.name, body.email)


@router.get("", response_model=list[UserSummary])
async def list_users(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await UserDirectory(db).list_users()


@router.get("/me", response_model=UserResponse)
async def get_me(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await UserDirectory(db).get_user(user_id)
