import itertools
from datetime import datetime, timedelta, timezone

import pytest

from bloodbank.service import BloodBank
from bloodbank.storage import MemoryStore

START = datetime(2026, 3, 15, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ids():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def backend():
    return MemoryStore()


@pytest.fixture
def bank(backend, clock, ids):
    """An empty bank with the eight stock rows at zero."""
    b = BloodBank(backend, clock=clock, id_factory=ids)
    b.ensure_stock()
    return b


@pytest.fixture
def donor(bank):
    return bank.users.register(
        name="John Doe",
        age=28,
        gender="Male",
        blood_group="O+",
        phone="555-123-4567",
        email="john@example.com",
        address="123 Main St, City",
        password="password",
        is_donor=True,
        is_receiver=True,
    )


@pytest.fixture
def receiver(bank):
    return bank.users.register(
        name="Mary Major",
        age=41,
        gender="Female",
        blood_group="A+",
        phone="555-222-3333",
        email="mary@example.com",
        address="9 Oak Ave, Town",
        password="s3cret",
        is_receiver=True,
    )
