import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.api.deps import get_current_user
from brew_cafe.crud.profile import promote_to_admin
from brew_cafe.db.deps import get_async_session
from brew_cafe.schemas.profile import ProfileOut, SetupAdminResponse
from brew_cafe.services.identity import AuthenticatedUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["setup"])

MESSAGES = {
    "created": "Admin profile created! You can now access /admin.",
    "promoted": "Role updated to admin! You can now access /admin.",
    "unchanged": "You are already an admin!",
}


@router.get("/setup-admin", response_model=SetupAdminResponse)
async def setup_admin(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Первичная настройка: делает текущего пользователя администратором.
    Повторный вызов ничего не меняет.
    """
    profile, outcome = await promote_to_admin(db, user.id, user.email)
    if outcome != "unchanged":
        logger.warning("User %s granted admin role (%s)", user.id, outcome)
    return SetupAdminResponse(message=MESSAGES[outcome], profile=ProfileOut.model_validate(profile))
