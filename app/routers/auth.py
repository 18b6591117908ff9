"""Authentication router: registration, login and token verification."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app import oauth2
from app.core.database import get_db
from app.core.middleware.rate_limit import LOGIN_LIMIT, REGISTER_LIMIT, limiter
from app.modules.users import User, UserService
from app.modules.users import schemas

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(user: User) -> schemas.AuthResponse:
    token = oauth2.create_access_token({"user_id": user.id})
    return schemas.AuthResponse(
        access_token=token, user=schemas.UserOut.model_validate(user)
    )


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.AuthResponse,
)
@limiter.limit(REGISTER_LIMIT)
async def register_user(
    request: Request,
    payload: schemas.UserCreate,
    db: Session = Depends(get_db),
):
    """Register a new user and return a bearer token for immediate use."""
    new_user = UserService(db).create_user(payload)
    return _auth_response(new_user)


@router.post("/login", response_model=schemas.AuthResponse)
@limiter.limit(LOGIN_LIMIT)
async def login(
    request: Request,
    payload: schemas.UserLogin,
    db: Session = Depends(get_db),
):
    user = UserService(db).authenticate(payload.email, payload.password)
    return _auth_response(user)


@router.get("/verify", response_model=schemas.UserOut)
def verify_token(current_user: User = Depends(oauth2.get_current_user)):
    return current_user
