"""
User records.

Passwords are stored as bcrypt hashes; the plain text is never kept on
the record.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import bcrypt

from .base import Entity
from .validation import FieldValidationError, max_length, one_of, require

USER_ROLES = ("admin", "editor", "reader")

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
EMAIL_PATTERN = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.[A-Za-z]{2,}$")

MIN_PASSWORD_LENGTH = 6

# Query projection that keeps the password hash out of results
PUBLIC_USER_PROJECTION = {"password": 0}


@dataclass
class User(Entity):
    username: str = ""
    email: str = ""
    password: str | None = None
    role: str = "reader"
    profile: dict[str, Any] = field(default_factory=dict)
    is_active: bool = True
    last_login: datetime | None = None

    def __post_init__(self) -> None:
        self.username = self.username.strip()
        self.email = self.email.strip().lower()

    def set_password(self, raw_password: str) -> None:
        """
        Hash and store a new password.

        Raises:
            FieldValidationError: If the password is too short
        """
        if not raw_password or len(raw_password) < MIN_PASSWORD_LENGTH:
            raise FieldValidationError(
                "password",
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
            )
        self.password = bcrypt.hashpw(raw_password.encode("utf-8"), bcrypt.gensalt()).decode(
            "utf-8"
        )

    def check_password(self, raw_password: str) -> bool:
        if not self.password or not raw_password:
            return False
        return bcrypt.checkpw(raw_password.encode("utf-8"), self.password.encode("utf-8"))

    @property
    def full_name(self) -> str:
        names = [self.profile.get("first_name"), self.profile.get("last_name")]
        return " ".join(n for n in names if n) or self.username

    def validate(self) -> None:
        require(self.username, "username", "Username")
        if not 3 <= len(self.username) <= 30:
            raise FieldValidationError(
                "username", "Username must be between 3 and 30 characters long"
            )
        if not USERNAME_PATTERN.match(self.username):
            raise FieldValidationError(
                "username", "Username can only contain letters, numbers, and underscores"
            )

        require(self.email, "email", "Email")
        if not EMAIL_PATTERN.match(self.email):
            raise FieldValidationError("email", "Please enter a valid email address")

        require(self.password, "password", "Password")
        one_of(self.role, USER_ROLES, "role", "Role")

        max_length(self.profile.get("first_name"), 50, "profile.first_name", "First name")
        max_length(self.profile.get("last_name"), 50, "profile.last_name", "Last name")
        max_length(self.profile.get("bio"), 500, "profile.bio", "Bio")
