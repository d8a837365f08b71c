"""Blood request lifecycle — submission, approval, rejection and fulfillment.

    Pending ──approve──> Approved ──fulfill──> Fulfilled
       └─────reject────> Rejected

Approval checks stock but does not reserve it; stock only moves on
fulfillment. Two approved requests can therefore over-commit the same units.
Every transition posts a notification to the requester.
"""

import logging
from datetime import datetime

from bloodbank import records
from bloodbank.clock import Clock, IdFactory, new_id, utc_now
from bloodbank.errors import (
    InsufficientStockError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from bloodbank.inventory import InventoryLedger, parse_blood_group
from bloodbank.models import (
    BloodGroup,
    BloodRequest,
    BloodSupply,
    NotificationType,
    RequestStatus,
    Urgency,
)
from bloodbank.notifications import NotificationSink
from bloodbank.records import RecordStore

logger = logging.getLogger("bloodbank.fulfillment")

# transition name -> (required source state, target state)
TRANSITIONS: dict[str, tuple[RequestStatus, RequestStatus]] = {
    "approve": (RequestStatus.pending, RequestStatus.approved),
    "reject": (RequestStatus.pending, RequestStatus.rejected),
    "fulfill": (RequestStatus.approved, RequestStatus.fulfilled),
}


def _units(quantity: int, group: BloodGroup) -> str:
    return f"{quantity} unit(s) of {group.value} blood"


class RequestDesk:
    def __init__(
        self,
        store: RecordStore,
        ledger: InventoryLedger,
        notifications: NotificationSink,
        clock: Clock = utc_now,
        id_factory: IdFactory = new_id,
    ):
        self.store = store
        self.ledger = ledger
        self.notifications = notifications
        self.clock = clock
        self.id_factory = id_factory

    # -- lookups --

    def get(self, request_id: str) -> BloodRequest:
        request = self.store.get_by_id(records.REQUESTS, request_id)
        if request is None:
            raise NotFoundError("Request", request_id)
        return request

    def list_requests(self, status: RequestStatus | str | None = None) -> list[BloodRequest]:
        """All requests, newest first, optionally narrowed to one status."""
        if status is None:
            items = self.store.get_all(records.REQUESTS)
        else:
            items = self.store.filter(records.REQUESTS, status=RequestStatus(status))
        return sorted(items, key=lambda r: r.request_date, reverse=True)

    def pending(self) -> list[BloodRequest]:
        return self.list_requests(RequestStatus.pending)

    def list_for_user(self, user_id: str) -> list[BloodRequest]:
        items = self.store.filter(records.REQUESTS, user_id=user_id)
        return sorted(items, key=lambda r: r.request_date, reverse=True)

    def supply_for_request(self, request_id: str) -> BloodSupply | None:
        return self.store.find_one(records.SUPPLIES, request_id=request_id)

    def list_supplies(self, user_id: str | None = None) -> list[BloodSupply]:
        if user_id is None:
            items = self.store.get_all(records.SUPPLIES)
        else:
            items = self.store.filter(records.SUPPLIES, user_id=user_id)
        return sorted(items, key=lambda s: s.supply_date, reverse=True)

    # -- transitions --

    def submit(
        self,
        user_id: str,
        blood_group: BloodGroup | str,
        quantity: int,
        urgency: Urgency | str,
        hospital_name: str,
        reason: str,
        notes: str | None = None,
    ) -> BloodRequest:
        """Create a Pending request. Stock is not consulted until approval."""
        group = parse_blood_group(blood_group)
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1 unit")
        if not hospital_name or not hospital_name.strip():
            raise ValidationError("Please enter a hospital name")
        if not reason or not reason.strip():
            raise ValidationError("Please enter a reason for the request")
        try:
            urgency = Urgency(urgency)
        except ValueError:
            raise ValidationError(f"Unknown urgency: {urgency}") from None

        request = BloodRequest(
            id=self.id_factory(),
            user_id=user_id,
            blood_group=group,
            quantity=quantity,
            request_date=self.clock(),
            status=RequestStatus.pending,
            urgency=urgency,
            hospital_name=hospital_name.strip(),
            reason=reason.strip(),
            notes=notes,
        )
        self.store.add(records.REQUESTS, request)
        logger.info("Request %s submitted: %d x %s", request.id, quantity, group.value)
        return request

    def _check_transition(self, request: BloodRequest, transition: str) -> RequestStatus:
        source, target = TRANSITIONS[transition]
        if request.status != source:
            raise InvalidTransitionError(request.status.value, transition)
        return target

    def approve(self, request_id: str) -> BloodRequest:
        request = self.get(request_id)
        target = self._check_transition(request, "approve")

        stock = self.ledger.get_by_group(request.blood_group)
        available = stock.quantity if stock else 0
        if available < request.quantity:
            raise InsufficientStockError(request.blood_group.value, request.quantity, available)

        request = request.model_copy(update={"status": target})
        self.store.update(records.REQUESTS, request)
        self.notifications.post(
            request.user_id,
            "Blood Request Approved",
            f"Your request for {_units(request.quantity, request.blood_group)} has been approved.",
            NotificationType.success,
        )
        logger.info("Request %s approved", request.id)
        return request

    def reject(self, request_id: str) -> BloodRequest:
        request = self.get(request_id)
        target = self._check_transition(request, "reject")

        request = request.model_copy(update={"status": target})
        self.store.update(records.REQUESTS, request)
        self.notifications.post(
            request.user_id,
            "Blood Request Rejected",
            f"Your request for {_units(request.quantity, request.blood_group)} has been rejected.",
            NotificationType.error,
        )
        logger.info("Request %s rejected", request.id)
        return request

    def fulfill(
        self,
        request_id: str,
        collection_center: str,
        supply_date: datetime | None = None,
        notes: str | None = None,
    ) -> tuple[BloodRequest, BloodSupply]:
        """Supply an approved request: record the supply, draw down stock."""
        request = self.get(request_id)
        target = self._check_transition(request, "fulfill")
        if not collection_center or not collection_center.strip():
            raise ValidationError("Please enter a collection center")
        if self.supply_for_request(request.id) is not None:
            raise InvalidTransitionError(request.status.value, "fulfill")

        if self.ledger.get_by_group(request.blood_group) is None:
            raise NotFoundError("Stock", request.blood_group.value)

        supply = BloodSupply(
            id=self.id_factory(),
            request_id=request.id,
            user_id=request.user_id,
            quantity=request.quantity,
            blood_group=request.blood_group,
            collection_center=collection_center.strip(),
            supply_date=supply_date or self.clock(),
            notes=notes,
        )
        self.ledger.apply_delta(request.blood_group, -request.quantity)
        self.store.add(records.SUPPLIES, supply)

        request = request.model_copy(update={"status": target, "delivery_date": supply.supply_date})
        self.store.update(records.REQUESTS, request)
        self.notifications.post(
            request.user_id,
            "Blood Supply Ready",
            f"Your requested {_units(request.quantity, request.blood_group)} is ready "
            f"for collection from {supply.collection_center}.",
            NotificationType.info,
        )
        logger.info("Request %s fulfilled from %s", request.id, supply.collection_center)
        return request, supply
