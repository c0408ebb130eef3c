from fastapi import APIRouter, Depends
from bookspace.core.auth import get_current_user
from bookspace.models import User

router = APIRouter(tags=["auth"])


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {
        "id": str(user.id),
        "auth_user_id": user.auth_user_id,
        "email": user.email,
        "name": user.name,
        "favorite_genres": user.favorite_genres or [],
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }
