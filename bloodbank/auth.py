"""Auth gate — credential lookup for users and admins.

Passwords are stored and compared as plain strings. This matches the
demo data the system ships with and is a known security gap.
"""

import logging
from dataclasses import asdict, dataclass, field

from bloodbank import records
from bloodbank.clock import Clock, utc_now
from bloodbank.models import Admin, Role, User
from bloodbank.records import AUTH_KEY, RecordStore

logger = logging.getLogger("bloodbank.auth")


@dataclass
class Session:
    role: Role
    subject_id: str
    name: str
    email: str
    created_at: str = field(default_factory=lambda: utc_now().isoformat())

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin

    def to_json(self) -> dict:
        data = asdict(self)
        data["role"] = self.role.value
        return data

    @classmethod
    def from_json(cls, data: dict) -> "Session | None":
        """Rebuild a stored session; ``None`` if the record is incomplete."""
        subject_id = data.get("subject_id")
        if not subject_id or data.get("role") not in {r.value for r in Role}:
            logger.warning("Ignoring malformed auth record")
            return None
        return cls(
            role=Role(data["role"]),
            subject_id=subject_id,
            name=data.get("name", ""),
            email=data.get("email", ""),
            created_at=data.get("created_at", ""),
        )


class AuthGate:
    def __init__(self, store: RecordStore, clock: Clock = utc_now):
        self.store = store
        self.clock = clock

    def _start(self, role: Role, subject_id: str, name: str, email: str) -> Session:
        session = Session(
            role=role,
            subject_id=subject_id,
            name=name,
            email=email,
            created_at=self.clock().isoformat(),
        )
        self.store.set_document(AUTH_KEY, session.to_json())
        return session

    def login_user(self, email: str, password: str) -> Session | None:
        user: User | None = self.store.find_one(records.USERS, email=email)
        if user is None or user.password != password:
            logger.warning("Failed user login for %s", email)
            return None
        logger.info("User %s logged in", user.id)
        return self._start(Role.user, user.id, user.name, user.email)

    def login_admin(self, username: str, password: str) -> Session | None:
        admin: Admin | None = self.store.find_one(records.ADMINS, username=username)
        if admin is None or admin.password != password:
            logger.warning("Failed admin login for %s", username)
            return None
        logger.info("Admin %s logged in", admin.username)
        return self._start(Role.admin, admin.id, admin.username, admin.email)

    def current_session(self) -> Session | None:
        data = self.store.get_document(AUTH_KEY)
        return Session.from_json(data) if data else None

    def logout(self) -> None:
        self.store.remove_document(AUTH_KEY)
