from datetime import timedelta

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from restmeta.auth import create_access_token, get_user_by_email, verify_password
from restmeta.config import settings
from restmeta.database import get_db
from restmeta.exceptions import AuthenticationError
from restmeta.schemas import Token
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/token", response_model=Token)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    """
    Exchange an email and password for a bearer token.
    """
    user = await get_user_by_email(form_data.username, db)

    if not user or not verify_password(form_data.password, user.hashed_password):
        logger.warning(f"Login failed for email: {form_data.username}")
        raise AuthenticationError("Invalid email or password")

    access_token = create_access_token(
        data={"sub": user.email},
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )
    logger.info(f"Access token created for user: {user.email}")

    return {"access_token": access_token, "token_type": "Bearer"}
