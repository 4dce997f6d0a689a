"""
Credential Store - account persistence keyed by unique email.

Only bcrypt hashes of passwords are ever written. Email uniqueness is checked
up front for a friendly error, but the unique index on ``users.email`` is what
actually settles concurrent registrations: the losing commit is rolled back and
reported as ``DuplicateEmail``.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DuplicateEmail, InvalidCredentials, NotFound, ValidationError
from app.core.security import get_password_hash, verify_password
from app.models.user import Role, User

logger = logging.getLogger("credential_store")

# Optional profile columns an account may carry
PROFILE_FIELDS = frozenset({
    "phone",
    "date_of_birth",
    "gender",
    "address",
    "city",
    "state",
    "pincode",
    "current_position",
    "experience",
    "skills",
    "education",
    "expected_salary",
    "preferred_location",
    "job_type",
    "work_mode",
    "interested_services",
    "resume",
})

# Fields the registration wizard requires before it will submit
DETAILED_REQUIRED_FIELDS = (
    "phone",
    "date_of_birth",
    "gender",
    "address",
    "city",
    "state",
    "experience",
    "education",
    "skills",
    "interested_services",
)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def _check_profile_keys(profile: dict[str, Any]) -> None:
    unknown = sorted(set(profile) - PROFILE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown profile fields: {', '.join(unknown)}")


class CredentialStore:
    """Account CRUD over a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    # ============== Lookups ==============

    def find_by_id(self, account_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == account_id).first()

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get(self, account_id: str) -> User:
        user = self.find_by_id(account_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def list_all(self) -> list[User]:
        return self.db.query(User).order_by(User.created_at.desc()).all()

    def count(self, role: Optional[Role] = None) -> int:
        query = self.db.query(User)
        if role is not None:
            query = query.filter(User.role == role.value)
        return query.count()

    # ============== Mutations ==============

    def create(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: Role = Role.USER,
        profile: Optional[dict[str, Any]] = None,
        detailed: bool = False,
    ) -> User:
        """
        Create an account.

        Args:
            name: Display name
            email: Login key, must be unused
            password: Plain text password; only its hash is stored
            role: Account role, elevated roles must be authorised by the caller
            profile: Optional profile columns (see PROFILE_FIELDS)
            detailed: True for wizard registrations; every field in
                DETAILED_REQUIRED_FIELDS must then be present and the account
                is marked profile-completed

        Returns:
            The persisted account

        Raises:
            ValidationError: required fields missing or unknown profile fields
            DuplicateEmail: the email is already registered
        """
        profile = dict(profile or {})
        _check_profile_keys(profile)

        missing = [
            field
            for field, value in (("name", name), ("email", email), ("password", password))
            if _is_blank(value)
        ]
        if detailed:
            missing.extend(f for f in DETAILED_REQUIRED_FIELDS if _is_blank(profile.get(f)))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        email = email.strip()
        if self.find_by_email(email) is not None:
            raise DuplicateEmail()

        user = User(
            name=name.strip(),
            email=email,
            hashed_password=get_password_hash(password),
            role=Role(role).value,
            profile_completed=detailed,
            **profile,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race on the unique email index
            self.db.rollback()
            raise DuplicateEmail()
        self.db.refresh(user)

        logger.info("Created %s account %s (detailed=%s)", user.role, user.id, detailed)
        return user

    def verify(self, email: str, password: str) -> User:
        """
        Check a login attempt.

        Unknown email, wrong password and disabled accounts all raise the same
        InvalidCredentials error; the unknown-email path still runs a dummy
        hash comparison.
        """
        user = self.find_by_email((email or "").strip())
        ok = verify_password(password or "", user.hashed_password if user else None)
        if not ok or user is None or not user.is_active:
            raise InvalidCredentials()
        return user

    def update_profile(self, account_id: str, changes: dict[str, Any]) -> User:
        """Apply owner-editable profile changes. Credentials and role are not editable here."""
        changes = dict(changes)
        forbidden = {"email", "role", "password", "hashed_password", "is_active", "id"} & set(changes)
        if forbidden:
            raise ValidationError(f"Fields cannot be changed here: {', '.join(sorted(forbidden))}")

        if "name" in changes:
            if _is_blank(changes["name"]):
                raise ValidationError("Name cannot be empty")
            name = changes.pop("name").strip()
        else:
            name = None
        _check_profile_keys(changes)

        user = self.get(account_id)
        if name is not None:
            user.name = name
        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(user)
        return user

    def set_role(self, account_id: str, role: Role) -> User:
        user = self.get(account_id)
        user.role = Role(role).value
        self.db.commit()
        self.db.refresh(user)
        logger.info("Account %s role set to %s", user.id, user.role)
        return user

    def set_active(self, account_id: str, is_active: bool) -> User:
        user = self.get(account_id)
        user.is_active = bool(is_active)
        self.db.commit()
        self.db.refresh(user)
        logger.info("Account %s active=%s", user.id, user.is_active)
        return user

    def delete(self, account_id: str) -> None:
        user = self.get(account_id)
        self.db.delete(user)
        self.db.commit()
        logger.info("Deleted account %s", account_id)

    def bootstrap_admin(self, email: str, password: str, name: str = "Administrator") -> Optional[User]:
        """Create the first admin account, but only while no accounts exist."""
        if not email or not password:
            return None
        if self.count() > 0:
            return None
        return self.create(name=name, email=email, password=password, role=Role.ADMIN)
