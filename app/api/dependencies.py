"""API dependencies"""

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import User
from app.db.session import get_session
from app.services import auth_service
from app.services.recipe_synthesizer import RecipeSynthesizer, get_recipe_synthesizer
from app.utils.session import get_current_user_id, is_authenticated


async def require_authentication(request: Request) -> int:
    """
    Session user id, or 401.

    Usage:
        @router.get("/protected")
        async def protected_route(user_id: int = Depends(require_authentication)):
            ...
    """
    if not is_authenticated(request):
        raise HTTPException(status_code=401, detail="Authentication required. Please log in.")

    user_id = get_current_user_id(request)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid session.")

    return user_id


async def get_current_active_user(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> User:
    """Signed-in user loaded fresh from the database"""
    user_id = await require_authentication(request)
    user = await auth_service.get_user_by_id(session, user_id)

    if not user:
        # Session outlived the account
        raise HTTPException(status_code=404, detail="User not found.")

    return user


async def optional_authentication(request: Request) -> int | None:
    """User id when signed in, None for anonymous callers"""
    if is_authenticated(request):
        return get_current_user_id(request)
    return None


def get_synthesizer() -> RecipeSynthesizer:
    return get_recipe_synthesizer()
