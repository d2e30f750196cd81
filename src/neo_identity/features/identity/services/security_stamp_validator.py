"""Security stamp validation for the application cookie."""

import logging
from typing import Generic, Optional

from ....core.exceptions import ServiceRegistrationError
from ..authentication import CookieValidateIdentityContext
from ..entities.protocols import SecurityStampValidatorProtocol, TUser
from ..options import IdentityOptions
from .sign_in_manager import SignInManager
from .user_manager import utcnow

logger = logging.getLogger(__name__)


class SecurityStampValidator(Generic[TUser]):
    """Revalidates cookie identities once the validation interval elapses.

    A still-valid stamp replaces the identity with a freshly issued one;
    a changed stamp rejects the identity and signs the user out.
    """

    def __init__(self, sign_in_manager: SignInManager[TUser], options: Optional[IdentityOptions] = None):
        if sign_in_manager is None:
            raise ValueError("sign_in_manager is required")
        self.sign_in_manager = sign_in_manager
        self.options = options or sign_in_manager.options

    async def validate(self, context: CookieValidateIdentityContext) -> None:
        identity = context.identity
        if identity is None:
            return

        current_utc = utcnow()
        issued_utc = context.properties.issued_utc
        if issued_utc is not None and current_utc - issued_utc <= self.options.security_stamp_validation_interval:
            return

        user_id = identity.find_first_value(self.options.claims_identity.user_id_claim_type)
        user = await self.sign_in_manager.validate_security_stamp(identity, user_id)

        if user is not None:
            context.replace_identity(await self.sign_in_manager.create_user_identity(user))
            context.properties.issued_utc = current_utc
            return

        logger.info(f"Rejecting identity for user {user_id}: security stamp validation failed")
        context.reject_identity()
        await self.sign_in_manager.sign_out()

    @staticmethod
    async def validate_identity_async(context: CookieValidateIdentityContext) -> None:
        """Cookie hook: resolve the scoped validator and run it."""
        validator = context.services.get_service(SecurityStampValidatorProtocol)
        if validator is None:
            raise ServiceRegistrationError(
                "No SecurityStampValidatorProtocol is registered for this scope",
                service_type="SecurityStampValidatorProtocol",
            )
        await validator.validate(context)
