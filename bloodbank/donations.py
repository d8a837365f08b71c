"""Donation log — admin-recorded donations and donor eligibility."""

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime

from bloodbank import records
from bloodbank.clock import Clock, IdFactory, new_id, utc_now
from bloodbank.config import DONATION_INTERVAL_MONTHS
from bloodbank.errors import NotFoundError, ValidationError
from bloodbank.inventory import InventoryLedger, parse_blood_group
from bloodbank.models import BloodGroup, Donation
from bloodbank.records import RecordStore

logger = logging.getLogger("bloodbank.donations")


def add_months(moment: datetime, months: int) -> datetime:
    """Same day ``months`` later, pinned to the last day of a shorter month."""
    index = moment.month - 1 + months
    year = moment.year + index // 12
    month = index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


@dataclass
class Eligibility:
    can_donate: bool
    last_donation_date: datetime | None
    next_donation_date: datetime | None
    days_until_next: int


def eligibility(donations: list[Donation], now: datetime) -> Eligibility:
    if not donations:
        return Eligibility(True, None, None, 0)
    last = max(d.date for d in donations)
    next_date = add_months(last, DONATION_INTERVAL_MONTHS)
    days = max(0, (next_date - now).days)
    return Eligibility(next_date <= now, last, next_date, days)


class DonationLog:
    def __init__(
        self,
        store: RecordStore,
        ledger: InventoryLedger,
        clock: Clock = utc_now,
        id_factory: IdFactory = new_id,
    ):
        self.store = store
        self.ledger = ledger
        self.clock = clock
        self.id_factory = id_factory

    def get(self, donation_id: str) -> Donation:
        donation = self.store.get_by_id(records.DONATIONS, donation_id)
        if donation is None:
            raise NotFoundError("Donation", donation_id)
        return donation

    def list_donations(self) -> list[Donation]:
        return sorted(self.store.get_all(records.DONATIONS), key=lambda d: d.date, reverse=True)

    def for_user(self, user_id: str) -> list[Donation]:
        items = self.store.filter(records.DONATIONS, user_id=user_id)
        return sorted(items, key=lambda d: d.date, reverse=True)

    def record_donation(
        self,
        user_id: str,
        date: datetime,
        blood_group: BloodGroup | str,
        quantity: int,
        collection_center: str,
        notes: str | None = None,
    ) -> Donation:
        """Log a donation and add its units to stock."""
        group = parse_blood_group(blood_group)
        user = self.store.get_by_id(records.USERS, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        if not user.is_donor:
            raise ValidationError(f"User {user_id} is not registered as a donor")
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1 unit")
        if not collection_center or not collection_center.strip():
            raise ValidationError("Please enter a collection center")

        donation = Donation(
            id=self.id_factory(),
            user_id=user_id,
            date=date,
            blood_group=group,
            quantity=quantity,
            collection_center=collection_center.strip(),
            notes=notes,
            created_at=self.clock(),
        )
        self.store.add(records.DONATIONS, donation)
        self.ledger.apply_delta(group, quantity)
        logger.info("Donation %s recorded: %d x %s from %s", donation.id, quantity, group.value, user_id)
        return donation

    def delete_donation(self, donation_id: str) -> Donation:
        """Remove a donation and take its units back out of stock."""
        donation = self.get(donation_id)
        self.ledger.apply_delta(donation.blood_group, -donation.quantity)
        self.store.delete(records.DONATIONS, donation_id)
        logger.info("Donation %s deleted", donation_id)
        return donation

    def eligibility(self, user_id: str) -> Eligibility:
        return eligibility(self.for_user(user_id), self.clock())
