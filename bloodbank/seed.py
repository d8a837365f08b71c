"""Demo data — one admin, two users and a little history around them."""

import random
from datetime import datetime, timedelta

from bloodbank import records
from bloodbank.clock import Clock, IdFactory, new_id, utc_now
from bloodbank.donations import add_months
from bloodbank.inventory import initial_stock
from bloodbank.models import (
    BLOOD_GROUPS,
    Admin,
    BloodGroup,
    BloodRequest,
    BloodSupply,
    Donation,
    Gender,
    Notification,
    NotificationType,
    Record,
    RequestStatus,
    Urgency,
    User,
)

DEMO_ADMIN_USERNAME = "admin"
DEMO_ADMIN_PASSWORD = "admin123"


def _donations(user: User, count: int, per_month: int, notes: str, centers: tuple[str, str],
               now: datetime, rng: random.Random, id_factory: IdFactory) -> list[Donation]:
    out = []
    for i in range(count):
        month_start = add_months(now, -(i // per_month))
        out.append(Donation(
            id=id_factory(),
            user_id=user.id,
            date=month_start - timedelta(days=rng.randrange(30)),
            blood_group=user.blood_group,
            quantity=1,
            notes=notes if i % 2 == 0 else None,
            created_at=month_start,
            collection_center=centers[i % 2],
        ))
    return out


def demo_data(
    clock: Clock = utc_now,
    id_factory: IdFactory = new_id,
    rng: random.Random | None = None,
) -> dict[str, list[Record]]:
    """Build every demo collection, keyed by record-store collection name."""
    rng = rng or random.Random()
    now = clock()

    def days(n: int) -> datetime:
        return now - timedelta(days=n)

    admin = Admin(
        id=id_factory(),
        username=DEMO_ADMIN_USERNAME,
        password=DEMO_ADMIN_PASSWORD,
        email="admin@bloodbank.com",
        created_at=now,
    )
    john = User(
        id=id_factory(), name="John Doe", age=28, gender=Gender.male,
        blood_group=BloodGroup.O_POS, phone="555-123-4567", email="john@example.com",
        address="123 Main St, City", password="password", is_donor=True, is_receiver=True,
        created_at=days(30), updated_at=now,
    )
    jane = User(
        id=id_factory(), name="Jane Smith", age=35, gender=Gender.female,
        blood_group=BloodGroup.A_POS, phone="555-987-6543", email="jane@example.com",
        address="456 Elm St, Town", password="password", is_donor=True, is_receiver=False,
        created_at=days(60), updated_at=now,
    )

    stock = initial_stock(
        {g.value: rng.randrange(5, 25) for g in BLOOD_GROUPS}, clock=clock, id_factory=id_factory,
    )

    donations = (
        _donations(john, 8, 3, "Regular donation", ("Central Blood Bank", "City Hospital"),
                   now, rng, id_factory)
        + _donations(jane, 5, 2, "First time donor", ("Central Blood Bank", "Medical Center"),
                     now, rng, id_factory)
    )

    fulfilled = BloodRequest(
        id=id_factory(), user_id=john.id, blood_group=BloodGroup.A_POS, quantity=2,
        request_date=days(15), status=RequestStatus.fulfilled, urgency=Urgency.medium,
        delivery_date=days(14), hospital_name="General Hospital", reason="Surgery",
    )
    requests = [
        fulfilled,
        BloodRequest(
            id=id_factory(), user_id=john.id, blood_group=BloodGroup.O_NEG, quantity=1,
            request_date=days(2), status=RequestStatus.pending, urgency=Urgency.high,
            hospital_name="St. Mary Hospital", reason="Emergency",
        ),
        BloodRequest(
            id=id_factory(), user_id=jane.id, blood_group=BloodGroup.B_POS, quantity=3,
            request_date=days(7), status=RequestStatus.approved, urgency=Urgency.medium,
            hospital_name="City Medical Center", reason="Transfusion",
        ),
    ]
    supplies = [
        BloodSupply(
            id=id_factory(), request_id=fulfilled.id, user_id=fulfilled.user_id,
            quantity=fulfilled.quantity, blood_group=fulfilled.blood_group,
            collection_center="Central Blood Bank", supply_date=days(14),
            notes="Supplied for surgery",
        ),
    ]
    notifications = [
        Notification(
            id=id_factory(), user_id=john.id, title="Blood Request Approved",
            message="Your blood request has been approved and will be fulfilled soon.",
            type=NotificationType.success, read=False, created_at=days(1),
        ),
        Notification(
            id=id_factory(), user_id=john.id, title="Donation Reminder",
            message="You are now eligible to donate blood again. Your last donation was 3 months ago.",
            type=NotificationType.info, read=True, created_at=days(3),
        ),
        Notification(
            id=id_factory(), user_id=jane.id, title="Thank You for Donating",
            message="Thank you for your recent blood donation. You have helped save lives!",
            type=NotificationType.success, read=False, created_at=days(2),
        ),
    ]

    return {
        records.USERS: [john, jane],
        records.ADMINS: [admin],
        records.DONATIONS: donations,
        records.REQUESTS: requests,
        records.STOCK: stock,
        records.SUPPLIES: supplies,
        records.NOTIFICATIONS: notifications,
    }
