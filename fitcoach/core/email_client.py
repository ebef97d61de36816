# fitcoach/core/email_client.py
from __future__ import annotations

"""
Email client utilities for the FitCoach backend.

Responsibilities:
  - Read Resend configuration from settings.
  - Provide a single send_email(...) function for services to use.

Typical .env configuration:

    RESEND_API_KEY=re_xxxxxxxx
    EMAIL_FROM_ADDRESS=no-reply@fitlyai.com
    EMAIL_FROM_NAME=FitlyAI
"""

import logging

import httpx

from fitcoach.core.config import get_settings

RESEND_SEND_EMAILS_URL = "https://api.resend.com/emails"
REQUEST_TIMEOUT_SECONDS = 10.0

logger = logging.getLogger(__name__)


def _from_header() -> str:
    settings = get_settings()
    if settings.EMAIL_FROM_NAME:
        return f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM_ADDRESS}>"
    return settings.EMAIL_FROM_ADDRESS


def send_email(
    to_email: str,
    subject: str,
    html_body: str,
) -> str | None:
    """
    Send an email to a single recipient through the Resend API.

    Parameters
    ----------
    to_email:
        Recipient email address.
    subject:
        Email subject line.
    html_body:
        HTML body.

    Returns
    -------
    The Resend email id, when the API returned one.

    Raises
    ------
    RuntimeError:
        If RESEND_API_KEY is not configured.
    httpx.HTTPError:
        If the request fails or Resend answers with an error status.
    """
    settings = get_settings()
    if not settings.RESEND_API_KEY:
        raise RuntimeError(
            "Email is not configured. Please set RESEND_API_KEY in .env."
        )

    headers = {
        "Authorization": f"Bearer {settings.RESEND_API_KEY}",
        "Content-Type": "application/json",
    }
    payload = {
        "from": _from_header(),
        "to": [to_email],
        "subject": subject,
        "html": html_body,
    }

    try:
        with httpx.Client(timeout=REQUEST_TIMEOUT_SECONDS) as client:
            response = client.post(RESEND_SEND_EMAILS_URL, headers=headers, json=payload)
            response.raise_for_status()
    except httpx.HTTPError:
        logger.exception("Resend API request failed (subject=%r)", subject)
        raise

    try:
        data = response.json()
    except ValueError:
        return None

    email_id = data.get("id") if isinstance(data, dict) else None
    logger.info("Sent email via Resend API (id=%s)", email_id)
    return email_id
