"""Tests for security stamp revalidation of cookie identities."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from neo_identity.core.exceptions import ServiceRegistrationError
from neo_identity.features.identity import (
    AuthenticationProperties,
    CookieValidateIdentityContext,
    IdentityAuthenticationTypes,
)
from neo_identity.features.identity.entities import SecurityStampValidatorProtocol
from neo_identity.features.identity.services import SecurityStampValidator

APPLICATION = IdentityAuthenticationTypes.APPLICATION_COOKIE_AUTHENTICATION_TYPE


def issued(minutes_ago):
    return AuthenticationProperties(issued_utc=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago))


@pytest.fixture
def validator(sign_in_manager):
    return SecurityStampValidator(sign_in_manager)


class TestSecurityStampValidator:
    """Test cookie identity revalidation."""

    @pytest.mark.asyncio
    async def test_recent_identity_is_not_checked(self, validator, sign_in_manager, user_manager, sample_user, service_provider):
        await user_manager.create(sample_user)
        identity = await sign_in_manager.create_user_identity(sample_user)
        await user_manager.update_security_stamp(sample_user)

        context = CookieValidateIdentityContext(identity, service_provider, properties=issued(5))
        await validator.validate(context)

        assert context.identity is identity
        assert not context.rejected
        assert not context.renewed

    @pytest.mark.asyncio
    async def test_valid_stamp_renews_identity(self, validator, sign_in_manager, user_manager, sample_user, service_provider):
        await user_manager.create(sample_user)
        identity = await sign_in_manager.create_user_identity(sample_user)
        properties = issued(60)
        before = properties.issued_utc

        context = CookieValidateIdentityContext(identity, service_provider, properties=properties)
        await validator.validate(context)

        assert context.renewed
        assert context.identity is not identity
        assert context.identity.find_first_value("sub") == sample_user.id
        assert context.properties.issued_utc > before

    @pytest.mark.asyncio
    async def test_changed_stamp_rejects_and_signs_out(
        self, validator, sign_in_manager, authentication_manager, user_manager, sample_user, service_provider
    ):
        await user_manager.create(sample_user)
        identity = await sign_in_manager.create_user_identity(sample_user)
        await user_manager.update_security_stamp(sample_user)

        context = CookieValidateIdentityContext(identity, service_provider, properties=issued(60))
        await validator.validate(context)

        assert context.rejected
        assert context.identity is None
        assert APPLICATION in authentication_manager.sign_outs

    @pytest.mark.asyncio
    async def test_missing_issue_time_is_checked(self, validator, sign_in_manager, user_manager, sample_user, service_provider):
        await user_manager.create(sample_user)
        identity = await sign_in_manager.create_user_identity(sample_user)
        await user_manager.delete(sample_user)

        context = CookieValidateIdentityContext(identity, service_provider)
        await validator.validate(context)

        assert context.rejected

    @pytest.mark.asyncio
    async def test_no_identity(self, validator, service_provider):
        context = CookieValidateIdentityContext(None, service_provider)
        await validator.validate(context)
        assert not context.rejected

    def test_sign_in_manager_is_required(self):
        with pytest.raises(ValueError):
            SecurityStampValidator(None)


class TestValidateIdentityHook:
    """Test the cookie notification hook."""

    @pytest.mark.asyncio
    async def test_resolves_scoped_validator(self, service_provider):
        scoped_validator = AsyncMock()
        service_provider.services[SecurityStampValidatorProtocol] = scoped_validator
        context = CookieValidateIdentityContext(None, service_provider)

        await SecurityStampValidator.validate_identity_async(context)

        scoped_validator.validate.assert_awaited_once_with(context)

    @pytest.mark.asyncio
    async def test_missing_validator_raises(self, service_provider):
        context = CookieValidateIdentityContext(None, service_provider)

        with pytest.raises(ServiceRegistrationError, match="SecurityStampValidatorProtocol"):
            await SecurityStampValidator.validate_identity_async(context)
