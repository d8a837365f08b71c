"""Dashboard aggregates for the admin and user views."""

from collections import Counter
from datetime import datetime

from bloodbank.donations import DonationLog, add_months
from bloodbank.fulfillment import RequestDesk
from bloodbank.inventory import InventoryLedger, stock_level
from bloodbank.models import RequestStatus
from bloodbank.notifications import NotificationSink
from bloodbank.users import UserRegistry


def _month_label(moment: datetime) -> str:
    return moment.strftime("%b %Y")


def donations_by_month(donations: list, now: datetime, months: int = 6) -> list[dict]:
    """Donation counts per calendar month, oldest first, ending at ``now``."""
    labels = [_month_label(add_months(now.replace(day=1), -i)) for i in reversed(range(months))]
    counts = Counter(_month_label(d.date) for d in donations)
    return [{"month": label, "donations": counts.get(label, 0)} for label in labels]


def stock_overview(ledger: InventoryLedger) -> list[dict]:
    return [
        {
            "blood_group": s.blood_group.value,
            "quantity": s.quantity,
            "level": stock_level(s.quantity),
            "last_updated": s.last_updated.isoformat(),
        }
        for s in ledger.list_stock()
    ]


def admin_dashboard(
    users: UserRegistry,
    donations: DonationLog,
    requests: RequestDesk,
    ledger: InventoryLedger,
    now: datetime,
) -> dict:
    all_users = users.list_users()
    all_donations = donations.list_donations()
    pending = requests.pending()
    return {
        "stats": {
            "total_donors": sum(1 for u in all_users if u.is_donor),
            "total_receivers": sum(1 for u in all_users if u.is_receiver),
            "total_donations": len(all_donations),
            "pending_requests": len(pending),
        },
        "recent_donations": [d.to_json() for d in all_donations[:5]],
        "pending_requests": [r.to_json() for r in pending],
        "donations_by_month": donations_by_month(all_donations, now),
        "stock": stock_overview(ledger),
        "total_units": ledger.total_units(),
    }


def user_dashboard(
    user_id: str,
    users: UserRegistry,
    donations: DonationLog,
    requests: RequestDesk,
    notifications: NotificationSink,
) -> dict:
    user = users.get(user_id)
    user_requests = requests.list_for_user(user_id)
    status_counts = Counter(r.status.value for r in user_requests)
    elig = donations.eligibility(user_id)
    return {
        "user": user.model_dump(mode="json", by_alias=True, exclude={"password"}),
        "donations": [d.to_json() for d in donations.for_user(user_id)],
        "requests": [r.to_json() for r in user_requests],
        "supplies": [s.to_json() for s in requests.list_supplies(user_id)],
        "request_status_counts": {s.value: status_counts.get(s.value, 0) for s in RequestStatus},
        "eligibility": {
            "can_donate": elig.can_donate,
            "last_donation_date": elig.last_donation_date.isoformat() if elig.last_donation_date else None,
            "next_donation_date": elig.next_donation_date.isoformat() if elig.next_donation_date else None,
            "days_until_next": elig.days_until_next,
        },
        "unread_notifications": notifications.unread_count(user_id),
    }
