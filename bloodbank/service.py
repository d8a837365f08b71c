"""BloodBank — wires every component over one record store."""

import logging
import random

from bloodbank import config, dashboard
from bloodbank.auth import AuthGate
from bloodbank.clock import Clock, IdFactory, new_id, utc_now
from bloodbank.donations import DonationLog
from bloodbank.fulfillment import RequestDesk
from bloodbank.inventory import InventoryLedger, initial_stock
from bloodbank.notifications import NotificationSink
from bloodbank.records import STOCK, RecordStore
from bloodbank.seed import demo_data
from bloodbank.storage import JsonFileStore, KeyValueStore, MemoryStore
from bloodbank.users import UserRegistry

logger = logging.getLogger("bloodbank.service")


class BloodBank:
    def __init__(
        self,
        backend: KeyValueStore | None = None,
        clock: Clock = utc_now,
        id_factory: IdFactory = new_id,
    ):
        self.backend = backend if backend is not None else MemoryStore()
        self.clock = clock
        self.id_factory = id_factory

        self.store = RecordStore(self.backend)
        self.ledger = InventoryLedger(self.store, clock)
        self.notifications = NotificationSink(self.store, clock, id_factory)
        self.requests = RequestDesk(self.store, self.ledger, self.notifications, clock, id_factory)
        self.donations = DonationLog(self.store, self.ledger, clock, id_factory)
        self.users = UserRegistry(self.store, clock, id_factory)
        self.auth = AuthGate(self.store, clock)

    @classmethod
    def from_config(cls) -> "BloodBank":
        """Build from environment settings: JSON files if a data dir is set."""
        backend = JsonFileStore(config.DATA_DIR) if config.DATA_DIR else MemoryStore()
        bank = cls(backend)
        if config.SEED_DEMO:
            bank.seed_demo()
        else:
            bank.ensure_stock()
        return bank

    def ensure_stock(self) -> list[str]:
        """Seed the eight empty stock rows if stock was never initialized."""
        return self.store.initialize({STOCK: initial_stock(clock=self.clock, id_factory=self.id_factory)})

    def seed_demo(self, rng: random.Random | None = None) -> list[str]:
        return self.store.initialize(demo_data(self.clock, self.id_factory, rng))

    def admin_dashboard(self) -> dict:
        return dashboard.admin_dashboard(self.users, self.donations, self.requests, self.ledger, self.clock())

    def user_dashboard(self, user_id: str) -> dict:
        return dashboard.user_dashboard(user_id, self.users, self.donations, self.requests, self.notifications)
