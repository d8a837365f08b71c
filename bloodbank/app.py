"""Blood bank HTTP API — FastAPI adapter over the BloodBank core."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from bloodbank import config
from bloodbank.errors import (
    BloodBankError,
    DuplicateEmailError,
    DuplicateIdError,
    InsufficientStockError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from bloodbank.models import BloodGroup, Gender, NotificationType, RequestStatus, Urgency
from bloodbank.service import BloodBank

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger("bloodbank.app")

ERROR_STATUS: dict[type[BloodBankError], int] = {
    NotFoundError: 404,
    DuplicateIdError: 409,
    DuplicateEmailError: 409,
    InsufficientStockError: 409,
    InvalidTransitionError: 409,
    ValidationError: 422,
}


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class LoginRequest(BaseModel):
    email: str
    password: str


class AdminLoginRequest(BaseModel):
    username: str
    password: str


class RegisterRequest(BaseModel):
    name: str
    age: int
    gender: Gender
    blood_group: BloodGroup
    phone: str
    email: str
    address: str
    password: str
    confirm_password: str | None = None
    is_donor: bool = False
    is_receiver: bool = False


class UserUpdate(BaseModel):
    name: str | None = None
    age: int | None = None
    gender: Gender | None = None
    blood_group: BloodGroup | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    password: str | None = None
    is_donor: bool | None = None
    is_receiver: bool | None = None


class StockUpdate(BaseModel):
    quantity: int = Field(ge=0)


class DonationCreate(BaseModel):
    user_id: str
    date: datetime
    blood_group: BloodGroup
    quantity: int = 1
    collection_center: str
    notes: str | None = None


class BloodRequestCreate(BaseModel):
    user_id: str
    blood_group: BloodGroup
    quantity: int = 1
    urgency: Urgency = Urgency.medium
    hospital_name: str
    reason: str
    notes: str | None = None


class FulfillRequest(BaseModel):
    collection_center: str
    supply_date: datetime | None = None
    notes: str | None = None


class NotificationCreate(BaseModel):
    user_id: str | None = None
    title: str
    message: str
    type: NotificationType = NotificationType.info


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(bank: BloodBank | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.bank = bank or BloodBank.from_config()
        logger.info("Blood bank API started")
        yield
        logger.info("Blood bank API stopped")

    app = FastAPI(title="Blood Bank", version="1.0.0", lifespan=lifespan)

    @app.exception_handler(BloodBankError)
    async def handle_domain_error(request: Request, exc: BloodBankError):
        status = ERROR_STATUS.get(type(exc), 400)
        body = {"detail": str(exc)}
        if isinstance(exc, InsufficientStockError):
            body["available"] = exc.available
        if isinstance(exc, InvalidTransitionError):
            body["current"] = exc.current
            body["attempted"] = exc.attempted
        return JSONResponse(status_code=status, content=body)

    _register_routes(app)
    return app


def _bank(request: Request) -> BloodBank:
    return request.app.state.bank


def _register_routes(app: FastAPI) -> None:

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "bloodbank"}

    # -- auth --

    @app.post("/auth/login")
    def login(body: LoginRequest, request: Request):
        session = _bank(request).auth.login_user(body.email, body.password)
        if session is None:
            raise HTTPException(status_code=401, detail="Invalid email or password")
        return session.to_json()

    @app.post("/auth/admin-login")
    def admin_login(body: AdminLoginRequest, request: Request):
        session = _bank(request).auth.login_admin(body.username, body.password)
        if session is None:
            raise HTTPException(status_code=401, detail="Invalid username or password")
        return session.to_json()

    @app.post("/auth/logout")
    def logout(request: Request):
        _bank(request).auth.logout()
        return {"status": "logged_out"}

    @app.get("/auth/session")
    def current_session(request: Request):
        session = _bank(request).auth.current_session()
        if session is None:
            raise HTTPException(status_code=401, detail="Not logged in")
        return session.to_json()

    # -- users --

    @app.post("/users", status_code=201)
    def register(body: RegisterRequest, request: Request):
        user = _bank(request).users.register(**body.model_dump())
        return user.model_dump(mode="json", by_alias=True, exclude={"password"})

    @app.get("/users")
    def list_users(request: Request, role: str | None = None):
        users = _bank(request).users.list_users(role)
        return [u.model_dump(mode="json", by_alias=True, exclude={"password"}) for u in users]

    @app.put("/users/{user_id}")
    def update_user(user_id: str, body: UserUpdate, request: Request):
        user = _bank(request).users.update_user(user_id, **body.model_dump(exclude_none=True))
        return user.model_dump(mode="json", by_alias=True, exclude={"password"})

    @app.delete("/users/{user_id}")
    def delete_user(user_id: str, request: Request):
        if not _bank(request).users.delete_user(user_id):
            raise HTTPException(status_code=404, detail=f"User {user_id} not found")
        return {"deleted": user_id}

    @app.get("/users/{user_id}/eligibility")
    def eligibility(user_id: str, request: Request):
        bank = _bank(request)
        bank.users.get(user_id)
        elig = bank.donations.eligibility(user_id)
        return {
            "can_donate": elig.can_donate,
            "next_donation_date": elig.next_donation_date.isoformat() if elig.next_donation_date else None,
            "days_until_next": elig.days_until_next,
        }

    # -- stock --

    @app.get("/stock")
    def list_stock(request: Request):
        return [s.to_json() for s in _bank(request).ledger.list_stock()]

    @app.put("/stock/{blood_group}")
    def set_stock(blood_group: BloodGroup, body: StockUpdate, request: Request):
        return _bank(request).ledger.set_quantity(blood_group, body.quantity).to_json()

    # -- donations --

    @app.get("/donations")
    def list_donations(request: Request, user_id: str | None = None):
        bank = _bank(request)
        items = bank.donations.for_user(user_id) if user_id else bank.donations.list_donations()
        return [d.to_json() for d in items]

    @app.post("/donations", status_code=201)
    def record_donation(body: DonationCreate, request: Request):
        return _bank(request).donations.record_donation(**body.model_dump()).to_json()

    @app.delete("/donations/{donation_id}")
    def delete_donation(donation_id: str, request: Request):
        return _bank(request).donations.delete_donation(donation_id).to_json()

    # -- requests --

    @app.get("/requests")
    def list_requests(request: Request, status: RequestStatus | None = None, user_id: str | None = None):
        desk = _bank(request).requests
        items = desk.list_for_user(user_id) if user_id else desk.list_requests(status)
        if user_id and status:
            items = [r for r in items if r.status == status]
        return [r.to_json() for r in items]

    @app.post("/requests", status_code=201)
    def submit_request(body: BloodRequestCreate, request: Request):
        return _bank(request).requests.submit(**body.model_dump()).to_json()

    @app.get("/requests/{request_id}")
    def get_request(request_id: str, request: Request):
        return _bank(request).requests.get(request_id).to_json()

    @app.post("/requests/{request_id}/approve")
    def approve_request(request_id: str, request: Request):
        return _bank(request).requests.approve(request_id).to_json()

    @app.post("/requests/{request_id}/reject")
    def reject_request(request_id: str, request: Request):
        return _bank(request).requests.reject(request_id).to_json()

    @app.post("/requests/{request_id}/fulfill")
    def fulfill_request(request_id: str, body: FulfillRequest, request: Request):
        blood_request, supply = _bank(request).requests.fulfill(request_id, **body.model_dump())
        return {"request": blood_request.to_json(), "supply": supply.to_json()}

    @app.get("/supplies")
    def list_supplies(request: Request, user_id: str | None = None):
        return [s.to_json() for s in _bank(request).requests.list_supplies(user_id)]

    # -- notifications --

    @app.get("/notifications")
    def list_notifications(request: Request, user_id: str | None = None):
        sink = _bank(request).notifications
        items = sink.list_for_user(user_id) if user_id else sink.list_all()
        return {
            "notifications": [n.to_json() for n in items],
            "unread": sink.unread_count(user_id) if user_id else sum(1 for n in items if not n.read),
        }

    @app.post("/notifications", status_code=201)
    def post_notification(body: NotificationCreate, request: Request):
        return _bank(request).notifications.post(**body.model_dump()).to_json()

    @app.post("/notifications/{notification_id}/read")
    def mark_read(notification_id: str, request: Request):
        notification = _bank(request).notifications.mark_read(notification_id)
        if notification is None:
            raise HTTPException(status_code=404, detail="Notification not found")
        return notification.to_json()

    # -- dashboards --

    @app.get("/dashboard/admin")
    def admin_dashboard(request: Request):
        return _bank(request).admin_dashboard()

    @app.get("/dashboard/users/{user_id}")
    def user_dashboard(user_id: str, request: Request):
        return _bank(request).user_dashboard(user_id)


app = create_app()
