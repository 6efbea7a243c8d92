from typing import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from roster.db.session import SessionLocal
from roster.db.models import User
from roster.core.security import decode_token
from roster.core.approval import ApprovalWorkflow, SqlAlchemyApprovalRepository, chain_provider

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_db() -> Generator:
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    db: Session = Depends(get_db),
    token: str = Depends(oauth2_scheme),
) -> User:
    """Get current authenticated user from JWT token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if token:
        user_id = decode_token(token)
        if user_id:
            user = db.query(User).filter(User.id == user_id).first()
            if user and user.is_active:
                return user

    raise credentials_exception


def get_approval_workflow(db: Session = Depends(get_db)) -> ApprovalWorkflow:
    """Approval workflow bound to the request's database session."""
    return ApprovalWorkflow(SqlAlchemyApprovalRepository(db), chain_provider)
