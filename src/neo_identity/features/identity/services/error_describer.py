"""Default descriptions for identity errors.

There is no protocol for the describer: subclass it and register the
subclass to reword errors or add new ones.
"""

from ..entities.results import IdentityError


class IdentityErrorDescriber:
    """Builds the IdentityError values returned by identity services."""

    def default_error(self) -> IdentityError:
        return IdentityError("DefaultError", "An unknown failure has occurred.")

    def concurrency_failure(self) -> IdentityError:
        return IdentityError("ConcurrencyFailure", "Optimistic concurrency failure, object has been modified.")

    def password_mismatch(self) -> IdentityError:
        return IdentityError("PasswordMismatch", "Incorrect password.")

    def invalid_user_name(self, name) -> IdentityError:
        return IdentityError(
            "InvalidUserName",
            f"User name '{name}' is invalid, can only contain letters or digits.",
        )

    def invalid_email(self, email) -> IdentityError:
        return IdentityError("InvalidEmail", f"Email '{email}' is invalid.")

    def duplicate_user_name(self, name) -> IdentityError:
        return IdentityError("DuplicateUserName", f"User name '{name}' is already taken.")

    def duplicate_email(self, email) -> IdentityError:
        return IdentityError("DuplicateEmail", f"Email '{email}' is already taken.")

    def invalid_role_name(self, name) -> IdentityError:
        return IdentityError("InvalidRoleName", f"Role name '{name}' is invalid.")

    def duplicate_role_name(self, name) -> IdentityError:
        return IdentityError("DuplicateRoleName", f"Role name '{name}' is already taken.")

    def user_already_has_password(self) -> IdentityError:
        return IdentityError("UserAlreadyHasPassword", "User already has a password set.")

    def user_lockout_not_enabled(self) -> IdentityError:
        return IdentityError("UserLockoutNotEnabled", "Lockout is not enabled for this user.")

    def user_already_in_role(self, role) -> IdentityError:
        return IdentityError("UserAlreadyInRole", f"User already in role '{role}'.")

    def user_not_in_role(self, role) -> IdentityError:
        return IdentityError("UserNotInRole", f"User is not in role '{role}'.")

    def password_too_short(self, length: int) -> IdentityError:
        return IdentityError("PasswordTooShort", f"Passwords must be at least {length} characters.")

    def password_requires_non_letter_and_digit(self) -> IdentityError:
        return IdentityError(
            "PasswordRequiresNonLetterAndDigit",
            "Passwords must have at least one non letter and non digit character.",
        )

    def password_requires_digit(self) -> IdentityError:
        return IdentityError("PasswordRequiresDigit", "Passwords must have at least one digit ('0'-'9').")

    def password_requires_lower(self) -> IdentityError:
        return IdentityError("PasswordRequiresLower", "Passwords must have at least one lowercase ('a'-'z').")

    def password_requires_upper(self) -> IdentityError:
        return IdentityError("PasswordRequiresUpper", "Passwords must have at least one uppercase ('A'-'Z').")
