# fitcoach/services/email_templates.py
from datetime import datetime, timezone
from html import escape

BRAND_NAME = "FitlyAI"
PRIMARY_COLOR = "#2563eb"


def _layout(*, title: str, subtitle: str, body_html: str) -> str:
    year = datetime.now(timezone.utc).year
    return f"""\
<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)}</title>
  </head>
  <body style="margin:0; padding:0; font-family:Arial, sans-serif; background-color:#f5f5f5;">
    <div style="max-width:600px; margin:0 auto; background-color:#ffffff; padding:40px 20px;">
      <div style="text-align:center; margin-bottom:40px;">
        <h1 style="color:{PRIMARY_COLOR}; margin:0; font-size:28px;">{BRAND_NAME}</h1>
        <p style="color:#6b7280; margin:5px 0 0 0;">{escape(subtitle)}</p>
      </div>
      {body_html}
      <div style="text-align:center; margin-top:30px;">
        <p style="color:#9ca3af; font-size:12px; margin:0;">&copy; {year} {BRAND_NAME}. All rights reserved.</p>
      </div>
    </div>
  </body>
</html>
"""


def _button(*, url: str, text: str, color: str = PRIMARY_COLOR) -> str:
    return (
        '<div style="text-align:center; margin:30px 0;">'
        f'<a href="{escape(url, quote=True)}" style="background-color:{color}; color:#ffffff; '
        "padding:12px 24px; text-decoration:none; border-radius:6px; font-weight:500; "
        f'display:inline-block;">{escape(text)}</a></div>'
    )


def _link_fallback(url: str) -> str:
    safe = escape(url, quote=True)
    return (
        '<p style="color:#6b7280; font-size:13px; line-height:1.6;">'
        "If the button does not work, copy this link into your browser:<br>"
        f'<a href="{safe}" style="color:{PRIMARY_COLOR}; word-break:break-all;">{safe}</a></p>'
    )


def verification_email(verification_url: str) -> tuple[str, str]:
    """Return (subject, html)."""
    body = (
        '<h2 style="color:#1f2937;">Confirm your email</h2>'
        '<p style="color:#374151; line-height:1.6;">Thanks for signing up! '
        "Please confirm your email address to activate your account.</p>"
        + _button(url=verification_url, text="Verify Email")
        + _link_fallback(verification_url)
        + '<p style="color:#6b7280; font-size:14px;">If you did not create an account, '
        "you can ignore this email.</p>"
    )
    return (
        f"Verify Your {BRAND_NAME} Account",
        _layout(title="Verify your email", subtitle="Email Verification", body_html=body),
    )


def password_reset_email(reset_url: str, first_name: str) -> tuple[str, str]:
    body = (
        f'<h2 style="color:#1f2937;">Hi {escape(first_name)},</h2>'
        '<p style="color:#374151; line-height:1.6;">We received a request to reset your '
        f"{BRAND_NAME} password. Click the button below to create a new password:</p>"
        + _button(url=reset_url, text="Reset Password", color="#dc2626")
        + '<p style="color:#6b7280; font-size:14px; line-height:1.6;">If you didn\'t request '
        "this password reset, please ignore this email. Your password will remain unchanged.</p>"
        '<p style="color:#6b7280; font-size:14px; line-height:1.6;">This link will expire in '
        "1 hour for security purposes.</p>"
    )
    return (
        f"Reset Your {BRAND_NAME} Password",
        _layout(title="Reset your password", subtitle="Password Reset Request", body_html=body),
    )


def welcome_email(first_name: str, app_url: str) -> tuple[str, str]:
    body = (
        f'<h2 style="color:#1f2937;">Welcome, {escape(first_name)}!</h2>'
        f'<p style="color:#374151; line-height:1.6;">Thank you for joining {BRAND_NAME}! '
        "Your AI fitness coach is ready when you are.</p>"
        '<ul style="color:#374151; line-height:1.6;">'
        "<li>Complete your fitness profile</li>"
        "<li>Set your health and fitness goals</li>"
        "<li>Start chatting with your AI coach</li>"
        "</ul>"
        + _button(url=app_url, text="Start Your Journey")
        + '<p style="color:#6b7280; font-size:14px;"><strong>Important:</strong> '
        f"{BRAND_NAME} provides general fitness guidance. Always consult with healthcare "
        "professionals for medical advice.</p>"
    )
    return (
        f"Welcome to {BRAND_NAME} - Your AI Fitness Journey Starts Now!",
        _layout(title="Welcome", subtitle="Your Personal AI Fitness Coach", body_html=body),
    )


def subscription_email(
    first_name: str, plan_name: str, amount: str, app_url: str
) -> tuple[str, str]:
    body = (
        f'<h2 style="color:#1f2937;">Congratulations, {escape(first_name)}!</h2>'
        f'<p style="color:#374151; line-height:1.6;">Your {escape(plan_name)} subscription '
        "has been successfully activated.</p>"
        '<div style="background-color:#f3f4f6; padding:15px; border-radius:6px;">'
        f'<p style="color:#374151; margin:0; font-size:14px;"><strong>Subscription:</strong> '
        f"{escape(plan_name)} Plan<br><strong>Amount:</strong> ${escape(amount)}/month</p></div>"
        + _button(url=app_url, text="Access Your Dashboard")
    )
    return (
        f"Welcome to {BRAND_NAME} {plan_name} - Let's Transform Your Fitness!",
        _layout(title="Subscription activated", subtitle="Subscription Activated!", body_html=body),
    )
