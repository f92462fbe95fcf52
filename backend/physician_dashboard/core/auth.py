"""
Authentication boundary: who is signed in, and whether the dashboard may be used.

The data core never authorizes anything itself. It only asks this module for
the current actor's display name (recorded as ``uploadedBy``) and relies on the
composition root to refuse access while nobody is signed in.
"""
import json
import logging
import re
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from ..models.base import generate_uuid
from ..models.user import User, UserRole
from .config import Settings, settings as default_settings
from .errors import AuthenticationError, ValidationError
from .security import get_password_hash, verify_password
from .time_utils import utcnow

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SPECIAL_CHARS = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")


def check_password_strength(password: str) -> Optional[str]:
    """Return a message describing why ``password`` is too weak, or None."""
    if not password:
        return "Password is required"
    if len(password) < 8:
        return "Password must be at least 8 characters long"
    classes = [
        bool(re.search(r"[A-Z]", password)),
        bool(re.search(r"[a-z]", password)),
        bool(re.search(r"\d", password)),
        bool(SPECIAL_CHARS.search(password)),
    ]
    if sum(classes) < 3:
        return "Password must contain at least 3 of: uppercase, lowercase, numbers, special characters"
    return None


class AuthSession:

    def __init__(self, kv_store, settings: Optional[Settings] = None, clock: Optional[Callable[[], datetime]] = None):
        self.kv_store = kv_store
        self.settings = settings or default_settings
        self._clock = clock or utcnow
        self._current_user: Optional[User] = None
        self._expires_at: Optional[datetime] = None
        self._failed_attempts = 0
        self._locked_until: Optional[datetime] = None

    # ------------------------------------------------------------------
    # Boundary contract
    # ------------------------------------------------------------------

    def is_authenticated(self) -> bool:
        if self._current_user is None:
            return False
        if self._expires_at is not None and self._clock() >= self._expires_at:
            logger.info("Session for %s expired", self._current_user.email)
            self._current_user = None
            self._expires_at = None
            return False
        return True

    def current_actor_name(self) -> str:
        if self.is_authenticated():
            return self._current_user.display_name
        return self.settings.DEFAULT_ACTOR_NAME

    @property
    def current_user(self) -> Optional[User]:
        return self._current_user if self.is_authenticated() else None

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        license_number: str = "",
        specialization: str = "",
        role: str = UserRole.PHYSICIAN,
    ) -> User:
        email = (email or "").strip().lower()
        errors: Dict[str, str] = {}
        if not EMAIL_PATTERN.match(email):
            errors["email"] = "Please enter a valid email address"
        weakness = check_password_strength(password)
        if weakness:
            errors["password"] = weakness
        if len((first_name or "").strip()) < 2:
            errors["firstName"] = "This field must be at least 2 characters long"
        if len((last_name or "").strip()) < 2:
            errors["lastName"] = "This field must be at least 2 characters long"
        users = self._load_users()
        if any(u.email == email for u in users):
            errors["email"] = "An account with this email already exists"
        if errors:
            raise ValidationError(errors)

        user = User(
            id=generate_uuid(),
            email=email,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            hashed_password=get_password_hash(password),
            license_number=license_number,
            specialization=specialization,
            role=role,
            registered_at=self._clock(),
        )
        users.append(user)
        self._save_users(users)
        logger.info("Registered user %s", email)
        return user

    def login(self, email: str, password: str, remember_me: bool = False) -> User:
        now = self._clock()
        if self._locked_until is not None:
            if now < self._locked_until:
                raise AuthenticationError(
                    "Account temporarily locked due to too many failed attempts. Please try again later."
                )
            self._locked_until = None
            self._failed_attempts = 0

        email = (email or "").strip().lower()
        users = self._load_users()
        user = next((u for u in users if u.email == email), None)
        if user is None or not verify_password(password or "", user.hashed_password):
            self._register_failure(email, now)
        if not user.is_active:
            raise AuthenticationError("Account is disabled")

        self._failed_attempts = 0
        user.last_login = now
        self._save_users(users)

        lifetime = timedelta(days=self.settings.REMEMBER_ME_DAYS) if remember_me else timedelta(hours=self.settings.SESSION_HOURS)
        self._current_user = user
        self._expires_at = now + lifetime
        logger.info("User %s logged in", email)
        return user

    def logout(self) -> None:
        if self._current_user is not None:
            logger.info("User %s logged out", self._current_user.email)
        self._current_user = None
        self._expires_at = None

    def ensure_user(self, email: str, password: str, first_name: str, last_name: str) -> User:
        """Create the account if it does not exist yet (idempotent)."""
        existing = next((u for u in self._load_users() if u.email == email.strip().lower()), None)
        if existing is not None:
            return existing
        return self.register(email, password, first_name, last_name)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _register_failure(self, email: str, now: datetime) -> None:
        self._failed_attempts += 1
        logger.warning("Login failed for %s (attempt %d)", email, self._failed_attempts)
        if self._failed_attempts >= self.settings.MAX_LOGIN_ATTEMPTS:
            self._locked_until = now + timedelta(minutes=self.settings.LOCKOUT_MINUTES)
            logger.warning("Login locked for %d minutes", self.settings.LOCKOUT_MINUTES)
            raise AuthenticationError(
                f"Too many failed attempts. Account locked for {self.settings.LOCKOUT_MINUTES} minutes."
            )
        remaining = self.settings.MAX_LOGIN_ATTEMPTS - self._failed_attempts
        raise AuthenticationError(
            f"Invalid email or password. {remaining} attempt{'s' if remaining > 1 else ''} remaining."
        )

    def _load_users(self) -> List[User]:
        raw = self.kv_store.get(self.settings.STORAGE_KEY_USERS)
        if raw is None:
            return []
        try:
            data = json.loads(raw.decode("utf-8"))
            if not isinstance(data, list):
                raise ValueError("expected a JSON array")
            return [User.model_validate(item) for item in data]
        except (UnicodeDecodeError, ValueError) as exc:
            logger.warning("Stored accounts under %s are unusable, treating as empty: %s",
                           self.settings.STORAGE_KEY_USERS, exc)
            return []

    def _save_users(self, users: List[User]) -> None:
        payload = json.dumps([u.model_dump(mode="json", by_alias=True) for u in users])
        self.kv_store.set(self.settings.STORAGE_KEY_USERS, payload.encode("utf-8"))
