# fitcoach/routers/billing.py
from fastapi import APIRouter, Depends, Request
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from fitcoach.core.auth import get_current_user
from fitcoach.core.config import get_settings
from fitcoach.database import get_session
from fitcoach.models.user import User
from fitcoach.repositories.user_repo import UserRepository
from fitcoach.schemas.billing import CheckoutRequest, CheckoutResponse, WebhookAck
from fitcoach.services.billing_service import BillingService
from fitcoach.services.notification_service import (
    NotificationSender,
    get_notification_sender,
)

router = APIRouter(prefix="/billing", tags=["Billing"])

repo = UserRepository()


def get_billing_service(
    notifier: NotificationSender = Depends(get_notification_sender),
) -> BillingService:
    return BillingService(repo, notifier)


@router.post("/checkout-session", response_model=CheckoutResponse)
def create_checkout_session(
    payload: CheckoutRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: BillingService = Depends(get_billing_service),
):
    """
    Start a Stripe Checkout subscription for the current user.
    Success/cancel URLs point back at the calling frontend origin.
    """
    origin = request.headers.get("origin") or get_settings().FRONTEND_URL
    return service.create_checkout_session(current_user, payload.tier, origin.rstrip("/"))


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    session: Session = Depends(get_session),
    service: BillingService = Depends(get_billing_service),
):
    """
    Stripe webhook. The raw body is needed for signature verification.

    Handled:
      - checkout.session.completed    -> active + tier
      - customer.subscription.updated -> past_due / active
      - customer.subscription.deleted -> cancelled, tier free
    """
    payload = await request.body()
    event = service.construct_event(payload, request.headers.get("stripe-signature"))
    # DB commits and the confirmation email are blocking
    await run_in_threadpool(service.handle_event, session, event)
    return WebhookAck(received=True)
