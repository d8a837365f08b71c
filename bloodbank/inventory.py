"""Inventory ledger — one authoritative unit count per blood group."""

import logging

from bloodbank import records
from bloodbank.clock import Clock, IdFactory, new_id, utc_now
from bloodbank.config import CRITICAL_STOCK_LEVEL, LOW_STOCK_LEVEL
from bloodbank.errors import NotFoundError, ValidationError
from bloodbank.models import BLOOD_GROUPS, BloodGroup, BloodStock
from bloodbank.records import RecordStore

logger = logging.getLogger("bloodbank.inventory")


def parse_blood_group(value: BloodGroup | str) -> BloodGroup:
    try:
        return BloodGroup(value)
    except ValueError:
        raise ValidationError(f"Unknown blood group: {value}") from None


def stock_level(quantity: int) -> str:
    """Classify a unit count as ``critical``, ``low`` or ``adequate``."""
    if quantity < CRITICAL_STOCK_LEVEL:
        return "critical"
    if quantity < LOW_STOCK_LEVEL:
        return "low"
    return "adequate"


def initial_stock(
    quantities: dict[str, int] | None = None,
    clock: Clock = utc_now,
    id_factory: IdFactory = new_id,
) -> list[BloodStock]:
    """Build the eight stock rows, one per blood group, in canonical order."""
    quantities = quantities or {}
    now = clock()
    return [
        BloodStock(
            id=id_factory(),
            blood_group=group,
            quantity=max(0, quantities.get(group.value, 0)),
            last_updated=now,
        )
        for group in BLOOD_GROUPS
    ]


class InventoryLedger:
    def __init__(self, store: RecordStore, clock: Clock = utc_now):
        self.store = store
        self.clock = clock

    def get_by_group(self, blood_group: BloodGroup | str) -> BloodStock | None:
        return self.store.find_one(records.STOCK, blood_group=parse_blood_group(blood_group))

    def list_stock(self) -> list[BloodStock]:
        order = {group: i for i, group in enumerate(BLOOD_GROUPS)}
        return sorted(self.store.get_all(records.STOCK), key=lambda s: order[s.blood_group])

    def apply_delta(self, blood_group: BloodGroup | str, delta: int) -> BloodStock:
        """Add ``delta`` units (negative to withdraw), clamping at zero."""
        group = parse_blood_group(blood_group)
        stock = self.get_by_group(group)
        if stock is None:
            raise NotFoundError("Stock", group.value)

        target = stock.quantity + delta
        if target < 0:
            logger.warning(
                "Withdrawal of %d %s units exceeds stock of %d; clamping to 0",
                -delta, group.value, stock.quantity,
            )
        updated = stock.model_copy(update={
            "quantity": max(0, target),
            "last_updated": self.clock(),
        })
        self.store.update(records.STOCK, updated)
        logger.info("Stock %s: %d -> %d", group.value, stock.quantity, updated.quantity)
        return updated

    def set_quantity(self, blood_group: BloodGroup | str, quantity: int) -> BloodStock:
        """Manual correction: move the count to ``quantity``."""
        if quantity < 0:
            raise ValidationError("Quantity cannot be negative")
        stock = self.get_by_group(blood_group)
        if stock is None:
            raise NotFoundError("Stock", parse_blood_group(blood_group).value)
        if quantity == stock.quantity:
            return stock
        return self.apply_delta(blood_group, quantity - stock.quantity)

    def total_units(self) -> int:
        return sum(s.quantity for s in self.store.get_all(records.STOCK))

    def critical_levels(self) -> list[BloodStock]:
        return [s for s in self.list_stock() if stock_level(s.quantity) == "critical"]

    def low_levels(self) -> list[BloodStock]:
        return [s for s in self.list_stock() if stock_level(s.quantity) == "low"]
