"""FastAPI dependencies."""
import logging
from typing import Annotated

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from ladders.database import get_db
from ladders.services.admin_auth_service import AdminAuthService
from ladders.utils.exceptions import InvalidCredentialsError

logger = logging.getLogger(__name__)

admin_basic = HTTPBasic(auto_error=False)


async def require_admin(
        credentials: Annotated[HTTPBasicCredentials | None, Depends(admin_basic)],
        db: AsyncSession = Depends(get_db),
) -> str:
    """Gate admin routes behind the shared admin credential (HTTP Basic).

    Returns the admin username for audit fields.
    """
    if credentials is None:
        raise HTTPException(
            status_code=401, detail="missing_credentials", headers={"WWW-Authenticate": "Basic"}
        )

    try:
        await AdminAuthService(db).login(credentials.username, credentials.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(
            status_code=401, detail=exc.code, headers={"WWW-Authenticate": "Basic"}
        ) from exc

    return credentials.username
