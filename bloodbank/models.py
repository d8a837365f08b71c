"""Domain records — persisted as JSON with camelCase field names."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class BloodGroup(str, Enum):
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"


# Canonical display and seeding order
BLOOD_GROUPS: list[BloodGroup] = list(BloodGroup)


class Gender(str, Enum):
    male = "Male"
    female = "Female"
    other = "Other"


class RequestStatus(str, Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"
    fulfilled = "Fulfilled"


class Urgency(str, Enum):
    low = "Low"
    medium = "Medium"
    high = "High"


class NotificationType(str, Enum):
    info = "info"
    success = "success"
    warning = "warning"
    error = "error"


class Role(str, Enum):
    user = "user"
    admin = "admin"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

class Record(BaseModel):
    """Anything the record store keeps: a model with a unique ``id``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str

    @field_validator("*")
    @classmethod
    def _assume_utc(cls, value):
        # Stored timestamps are always UTC-aware so they stay comparable
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class User(Record):
    name: str
    age: int
    gender: Gender
    blood_group: BloodGroup
    phone: str
    email: str
    address: str
    password: str
    is_donor: bool
    is_receiver: bool
    created_at: datetime
    updated_at: datetime


class Admin(Record):
    username: str
    password: str
    email: str
    created_at: datetime


class Donation(Record):
    user_id: str
    date: datetime
    blood_group: BloodGroup
    quantity: int
    collection_center: str
    notes: str | None = None
    created_at: datetime


class BloodRequest(Record):
    user_id: str
    blood_group: BloodGroup
    quantity: int
    request_date: datetime
    status: RequestStatus = RequestStatus.pending
    urgency: Urgency = Urgency.medium
    hospital_name: str
    reason: str
    notes: str | None = None
    delivery_date: datetime | None = None


class BloodStock(Record):
    blood_group: BloodGroup
    quantity: int
    last_updated: datetime


class BloodSupply(Record):
    request_id: str
    user_id: str
    quantity: int
    blood_group: BloodGroup
    collection_center: str
    supply_date: datetime
    notes: str | None = None


class Notification(Record):
    user_id: str | None = None
    title: str
    message: str
    type: NotificationType = NotificationType.info
    read: bool = False
    created_at: datetime
