"""Admin credential check: login and change password."""

import logging
import secrets

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ladders.config import get_settings
from ladders.models.admin_credential import ADMIN_CREDENTIAL_ID, AdminCredential
from ladders.utils.exceptions import IncorrectCurrentPasswordError, InvalidCredentialsError, InvalidInputError
from ladders.utils.passwords import PasswordValidationError, hash_password, validate_password_strength, verify_password

logger = logging.getLogger(__name__)


class AdminAuthService:
    """Verifies the single shared admin credential.

    No session is issued; callers decide how to remember a successful login.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()

    async def _get_credential(self, for_update: bool = False) -> AdminCredential | None:
        stmt = select(AdminCredential).where(AdminCredential.id == ADMIN_CREDENTIAL_ID)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def ensure_credential(self) -> AdminCredential:
        """Create the admin row from ADMIN_USERNAME/ADMIN_PASSWORD if it does not exist yet."""
        credential = await self._get_credential()
        if credential:
            return credential

        credential = AdminCredential(
            id=ADMIN_CREDENTIAL_ID,
            username=self.settings.admin_username,
            password_hash=hash_password(self.settings.admin_password),
        )
        self.db.add(credential)
        try:
            await self.db.commit()
        except IntegrityError:
            # Another worker bootstrapped it first
            await self.db.rollback()
            return await self._get_credential()

        logger.warning(
            f"Admin credentials initialised with default admin user '{credential.username}'. "
            "Remember to change the password."
        )
        return credential

    async def login(self, username: str, password: str) -> bool:
        """Verify admin credentials.

        Raises:
            InvalidCredentialsError: Username or password mismatch
        """
        credential = await self.ensure_credential()

        username_ok = secrets.compare_digest((username or "").encode("utf-8"), credential.username.encode("utf-8"))
        password_ok = verify_password(password or "", credential.password_hash)
        if not (username_ok and password_ok):
            logger.warning("Failed admin login attempt")
            raise InvalidCredentialsError()

        return True

    async def change_password(self, current_password: str, new_password: str) -> None:
        """Replace the admin password after verifying the current one.

        Raises:
            IncorrectCurrentPasswordError: Current password does not verify
            InvalidInputError: New password fails the strength policy
        """
        if not current_password or not new_password:
            raise InvalidInputError("Current password and new password are required.")

        await self.ensure_credential()
        try:
            credential = await self._get_credential(for_update=True)
            if not verify_password(current_password, credential.password_hash):
                raise IncorrectCurrentPasswordError()
            try:
                validate_password_strength(new_password)
            except PasswordValidationError as exc:
                raise InvalidInputError(str(exc)) from exc

            credential.password_hash = hash_password(new_password)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("Admin password changed")
