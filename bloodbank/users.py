"""User registry — registration, admin edits and lookups."""

import logging
from typing import Any

from bloodbank import records
from bloodbank.clock import Clock, IdFactory, new_id, utc_now
from bloodbank.config import MIN_DONOR_AGE
from bloodbank.errors import DuplicateEmailError, NotFoundError, ValidationError
from bloodbank.inventory import parse_blood_group
from bloodbank.models import Admin, Gender, User
from bloodbank.records import RecordStore

logger = logging.getLogger("bloodbank.users")

REQUIRED_FIELDS = ("name", "email", "password", "phone", "address")

# Fields an admin edit may change; id and createdAt are fixed
EDITABLE_FIELDS = {
    "name", "age", "gender", "blood_group", "phone", "email",
    "address", "password", "is_donor", "is_receiver",
}


def _validate_profile(data: dict[str, Any]) -> None:
    for name in REQUIRED_FIELDS:
        value = data.get(name)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{name} is required")
    if not data.get("is_donor") and not data.get("is_receiver"):
        raise ValidationError("Please select at least one role (Donor or Receiver)")
    if int(data.get("age") or 0) < MIN_DONOR_AGE:
        raise ValidationError(f"You must be at least {MIN_DONOR_AGE} years old to register")
    try:
        Gender(data.get("gender"))
    except ValueError:
        raise ValidationError(f"Unknown gender: {data.get('gender')}") from None
    parse_blood_group(data.get("blood_group"))


class UserRegistry:
    def __init__(self, store: RecordStore, clock: Clock = utc_now, id_factory: IdFactory = new_id):
        self.store = store
        self.clock = clock
        self.id_factory = id_factory

    def get(self, user_id: str) -> User:
        user = self.store.get_by_id(records.USERS, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def find_by_email(self, email: str) -> User | None:
        return self.store.find_one(records.USERS, email=email)

    def find_admin(self, username: str) -> Admin | None:
        return self.store.find_one(records.ADMINS, username=username)

    def list_users(self, role: str | None = None) -> list[User]:
        """All users, optionally only ``donor`` or ``receiver`` ones."""
        users = self.store.get_all(records.USERS)
        if role == "donor":
            users = [u for u in users if u.is_donor]
        elif role == "receiver":
            users = [u for u in users if u.is_receiver]
        elif role is not None:
            raise ValidationError(f"Unknown role filter: {role}")
        return sorted(users, key=lambda u: u.created_at, reverse=True)

    def register(
        self,
        *,
        name: str,
        age: int,
        gender: Gender | str,
        blood_group: str,
        phone: str,
        email: str,
        address: str,
        password: str,
        confirm_password: str | None = None,
        is_donor: bool = False,
        is_receiver: bool = False,
    ) -> User:
        if confirm_password is not None and password != confirm_password:
            raise ValidationError("Passwords do not match")
        data = {
            "name": name, "age": age, "gender": gender, "blood_group": blood_group,
            "phone": phone, "email": email, "address": address, "password": password,
            "is_donor": is_donor, "is_receiver": is_receiver,
        }
        _validate_profile(data)
        if self.find_by_email(email) is not None:
            raise DuplicateEmailError(email)

        now = self.clock()
        user = User(id=self.id_factory(), created_at=now, updated_at=now, **data)
        self.store.add(records.USERS, user)
        logger.info("Registered user %s (donor=%s receiver=%s)", user.id, is_donor, is_receiver)
        return user

    def update_user(self, user_id: str, **changes: Any) -> User:
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot edit fields: {', '.join(sorted(unknown))}")
        user = self.get(user_id)
        data = {**user.model_dump(include=EDITABLE_FIELDS), **changes}
        _validate_profile(data)
        if data["email"] != user.email and self.find_by_email(data["email"]) is not None:
            raise DuplicateEmailError(data["email"])

        updated = User.model_validate({
            **user.model_dump(), **data, "updated_at": self.clock(),
        })
        self.store.update(records.USERS, updated)
        logger.info("Updated user %s", user_id)
        return updated

    def delete_user(self, user_id: str) -> bool:
        deleted = self.store.delete(records.USERS, user_id)
        if deleted:
            logger.info("Deleted user %s", user_id)
        return deleted
