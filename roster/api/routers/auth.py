import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from roster.api.deps import get_db, get_current_user
from roster.api.schemas.auth import UserRegister, Token, UserResponse
from roster.core.rbac.roles import UserRole
from roster.core.security import verify_password, get_password_hash, create_access_token
from roster.db.models import Location, Position, Region, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(user_in: UserRegister, db: Session = Depends(get_db)):
    """Self-registration. The account stays inactive until a manager activates it."""
    if db.query(User).filter(User.email == user_in.email).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    for model, ref_id, label in (
        (Position, user_in.position_id, "Position"),
        (Location, user_in.location_id, "Location"),
        (Region, user_in.region_id, "Region"),
    ):
        if db.get(model, ref_id) is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{label} not found")

    user = User(
        email=user_in.email,
        password_hash=get_password_hash(user_in.password),
        name=user_in.name,
        role=UserRole.EMPLOYEE.value,
        is_active=False,
        position_id=user_in.position_id,
        location_id=user_in.location_id,
        region_id=user_in.region_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("User %s registered, awaiting activation", user.email)
    return user


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """Login and get access token."""
    user = db.query(User).filter(User.email == form_data.username).first()
    if not user or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is not active"
        )

    user.last_login = datetime.utcnow()
    db.commit()

    return Token(access_token=create_access_token(user.id, user.role))


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Get current user info."""
    return current_user
