"""Stripe checkout and webhook-driven subscription state."""

import threading
from unittest.mock import patch

import pytest

from fitcoach.core.config import get_settings
from fitcoach.repositories.user_repo import UserRepository
from fitcoach.services.billing_service import BillingService


repo = UserRepository()


@pytest.fixture
def billing(notifier):
    return BillingService(repo, notifier)


def _event(event_type, obj):
    return {"type": event_type, "data": {"object": obj}}


class TestWebhookEvents:
    """BillingService.handle_event state transitions."""

    def test_checkout_completed_activates_tier(self, billing, session, make_user, notifier) -> None:
        user = make_user()

        billing.handle_event(
            session,
            _event(
                "checkout.session.completed",
                {
                    "customer": "cus_123",
                    "subscription": "sub_123",
                    "metadata": {"user_id": str(user.id), "tier": "pro"},
                },
            ),
        )

        session.refresh(user)
        assert user.subscription_status == "active"
        assert user.subscription_tier == "pro"
        assert user.stripe_customer_id == "cus_123"
        assert user.stripe_subscription_id == "sub_123"

        kind, to_email, data = notifier.sent[-1]
        assert kind == "subscription"
        assert data == {"plan_name": "Pro", "amount": "19.99"}

    def test_checkout_completed_survives_email_failure(self, billing, session, make_user, notifier) -> None:
        user = make_user()
        notifier.fail = True

        billing.handle_event(
            session,
            _event(
                "checkout.session.completed",
                {"customer": "cus_1", "metadata": {"user_id": str(user.id), "tier": "premium"}},
            ),
        )

        session.refresh(user)
        assert user.subscription_tier == "premium"

    def test_checkout_for_unknown_user_is_ignored(self, billing, session) -> None:
        billing.handle_event(
            session,
            _event("checkout.session.completed", {"metadata": {"user_id": "999", "tier": "pro"}}),
        )

    def test_subscription_past_due_then_active(self, billing, session, make_user) -> None:
        user = make_user(
            subscription_status="active", subscription_tier="premium", stripe_customer_id="cus_9"
        )

        billing.handle_event(
            session, _event("customer.subscription.updated", {"customer": "cus_9", "status": "past_due"})
        )
        session.refresh(user)
        assert user.subscription_status == "past_due"

        billing.handle_event(
            session, _event("customer.subscription.updated", {"customer": "cus_9", "status": "active"})
        )
        session.refresh(user)
        assert user.subscription_status == "active"

    def test_subscription_deleted_downgrades(self, billing, session, make_user) -> None:
        user = make_user(
            subscription_status="active", subscription_tier="pro", stripe_customer_id="cus_7"
        )

        billing.handle_event(
            session, _event("customer.subscription.deleted", {"customer": "cus_7"})
        )

        session.refresh(user)
        assert user.subscription_status == "cancelled"
        assert user.subscription_tier == "free"


class TestBillingRoutes:

    def test_checkout_without_stripe_key(self, client, make_user, auth_headers) -> None:
        user = make_user()

        response = client.post(
            "/api/billing/checkout-session", headers=auth_headers(user), json={"tier": "premium"}
        )

        assert response.status_code == 503

    def test_checkout_rejects_unknown_tier(self, client, make_user, auth_headers) -> None:
        user = make_user()

        response = client.post(
            "/api/billing/checkout-session", headers=auth_headers(user), json={"tier": "gold"}
        )

        assert response.status_code == 400

    def test_checkout_session_created(self, client, make_user, auth_headers) -> None:
        user = make_user()
        settings = get_settings()

        with patch.object(settings, "STRIPE_SECRET_KEY", "sk_test_123"), patch(
            "stripe.checkout.Session.create"
        ) as create:
            create.return_value.id = "cs_test_1"
            create.return_value.url = "https://checkout.stripe.com/c/cs_test_1"
            response = client.post(
                "/api/billing/checkout-session",
                headers={**auth_headers(user), "Origin": "https://app.example.com"},
                json={"tier": "pro"},
            )

        assert response.status_code == 200
        assert response.json() == {
            "session_id": "cs_test_1",
            "url": "https://checkout.stripe.com/c/cs_test_1",
        }
        kwargs = create.call_args.kwargs
        assert kwargs["customer_email"] == user.email
        assert kwargs["metadata"] == {"user_id": str(user.id), "tier": "pro"}
        assert kwargs["success_url"].startswith("https://app.example.com/subscription-success")

    def test_webhook_without_secret(self, client) -> None:
        response = client.post("/api/billing/webhook", content=b"{}")

        assert response.status_code == 503

    def test_webhook_bad_signature(self, client) -> None:
        settings = get_settings()

        with patch.object(settings, "STRIPE_WEBHOOK_SECRET", "whsec_test"):
            response = client.post(
                "/api/billing/webhook",
                content=b'{"type": "ping"}',
                headers={"Stripe-Signature": "t=1,v1=bogus"},
            )

        assert response.status_code == 400

    def test_webhook_applies_event_off_the_event_loop(self, client, session, make_user) -> None:
        """Signature check runs on the loop; DB and email work runs in a worker thread."""
        user = make_user(stripe_customer_id="cus_42", subscription_status="active", subscription_tier="pro")
        settings = get_settings()
        threads = {}
        event = _event("customer.subscription.deleted", {"customer": "cus_42"})
        original_handle_event = BillingService.handle_event

        def fake_construct_event(payload, signature, secret):
            threads["construct"] = threading.get_ident()
            return event

        def tracking_handle_event(self, db_session, evt):
            threads["handle"] = threading.get_ident()
            return original_handle_event(self, db_session, evt)

        with patch.object(settings, "STRIPE_WEBHOOK_SECRET", "whsec_test"), patch(
            "stripe.Webhook.construct_event", side_effect=fake_construct_event
        ), patch.object(BillingService, "handle_event", tracking_handle_event):
            response = client.post(
                "/api/billing/webhook",
                content=b"{}",
                headers={"Stripe-Signature": "t=1,v1=signed"},
            )

        assert response.status_code == 200
        assert response.json() == {"received": True}
        assert threads["handle"] != threads["construct"]
        session.refresh(user)
        assert user.subscription_status == "cancelled"
        assert user.subscription_tier == "free"
