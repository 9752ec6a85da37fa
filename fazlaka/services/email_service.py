"""Email service using SendGrid."""

import logging
from html import escape

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from fazlaka.config import settings

logger = logging.getLogger(__name__)

OTP_PURPOSE_LABELS = {
    "login": "sign in",
    "register": "create your account",
    "reset": "reset your password",
    "verify": "verify your identity",
    "change-password": "change your password",
}


class EmailService:
    """Service for sending transactional emails via SendGrid.

    Every method returns False instead of raising when delivery fails, so
    a lost email never undoes the account change that triggered it.
    """

    @staticmethod
    def _send_email(to_email: str, subject: str, html_content: str, reply_to: str | None = None) -> bool:
        """Send email via SendGrid. Returns True if successful."""
        if not settings.sendgrid_api_key:
            logger.warning("SendGrid API key not configured, skipping email send")
            return False

        message = Mail(
            from_email=(settings.email_from_address, settings.email_from_name),
            to_emails=to_email,
            subject=subject,
            html_content=html_content,
        )
        if reply_to:
            message.reply_to = reply_to

        try:
            sg = SendGridAPIClient(settings.sendgrid_api_key)
            response = sg.send(message)
            logger.info(f"Email sent to {to_email}, status: {response.status_code}")
            return response.status_code in (200, 201, 202)
        except Exception:
            logger.exception(f"Failed to send email to {to_email}")
            return False

    @classmethod
    def send_verification_email(cls, email: str, token: str, name: str | None = None) -> bool:
        """Send email verification link."""
        verify_url = f"{settings.frontend_url}/verify-email?token={token}"
        html = f"""
        <h2>Verify Your Email</h2>
        <p>Hello {escape(name or "")},</p>
        <p>Click the link below to verify your email address:</p>
        <p><a href="{verify_url}">{verify_url}</a></p>
        <p>This link expires in {settings.email_verification_ttl_hours} hours.</p>
        <p>If you didn't create an account, you can ignore this email.</p>
        """
        return cls._send_email(email, "Verify Your Email - Fazlaka", html)

    @classmethod
    def send_welcome_email(cls, email: str, name: str | None = None) -> bool:
        """Send welcome email after verification."""
        login_url = f"{settings.frontend_url}/sign-in"
        html = f"""
        <h2>Welcome to Fazlaka, {escape(name or "friend")}!</h2>
        <p>Your email has been verified. You can now sign in to your account.</p>
        <p><a href="{login_url}">Sign in to Fazlaka</a></p>
        """
        return cls._send_email(email, "Welcome to Fazlaka!", html)

    @classmethod
    def send_password_reset_email(cls, email: str, token: str) -> bool:
        """Send password reset link."""
        reset_url = f"{settings.frontend_url}/reset-password?token={token}"
        html = f"""
        <h2>Reset Your Password</h2>
        <p>Click the link below to reset your password:</p>
        <p><a href="{reset_url}">{reset_url}</a></p>
        <p>This link expires in {settings.password_reset_ttl_hours} hours.</p>
        <p>If you didn't request this, you can ignore this email.</p>
        """
        return cls._send_email(email, "Reset Your Password - Fazlaka", html)

    @classmethod
    def send_magic_link_email(cls, email: str, token: str) -> bool:
        """Send passwordless sign-in link."""
        magic_url = f"{settings.frontend_url}/magic-link?token={token}"
        html = f"""
        <h2>Sign In to Fazlaka</h2>
        <p>Click the link below to sign in without a password:</p>
        <p><a href="{magic_url}">{magic_url}</a></p>
        <p>This link expires in {settings.magic_link_ttl_hours} hours and can be used once.</p>
        <p>If you didn't request this, you can ignore this email.</p>
        """
        return cls._send_email(email, "Your Sign-In Link - Fazlaka", html)

    @classmethod
    def send_otp_email(cls, email: str, code: str, purpose: str, name: str | None = None) -> bool:
        """Send a one-time code for the given purpose."""
        label = OTP_PURPOSE_LABELS.get(purpose, "verify your identity")
        html = f"""
        <h2>Your Verification Code</h2>
        <p>Hello {escape(name or "")},</p>
        <p>Use the following code to {label}:</p>
        <h1 style="font-size: 32px; letter-spacing: 8px; font-family: monospace;">{code}</h1>
        <p>This code expires in {settings.otp_ttl_minutes} minutes. Do not share it with anyone.</p>
        <p>If you didn't request this code, you can ignore this email.</p>
        """
        return cls._send_email(email, "Your Verification Code - Fazlaka", html)

    @classmethod
    def send_email_change_code(cls, new_email: str, code: str, name: str | None = None) -> bool:
        """Send the confirmation code for an email change to the new address."""
        html = f"""
        <h2>Confirm Your New Email</h2>
        <p>Hello {escape(name or "")},</p>
        <p>Someone asked to use this address for a Fazlaka account. Enter this code to confirm:</p>
        <h1 style="font-size: 32px; letter-spacing: 8px; font-family: monospace;">{code}</h1>
        <p>This code expires in {settings.email_change_ttl_minutes} minutes.</p>
        <p>If you didn't request this change, you can ignore this email.</p>
        """
        return cls._send_email(new_email, "Confirm Your New Email - Fazlaka", html)

    @classmethod
    def send_password_changed_notification(cls, email: str) -> bool:
        """Notify user their password was changed."""
        html = """
        <h2>Password Changed</h2>
        <p>Your password was successfully changed.</p>
        <p>If you didn't make this change, please contact support immediately.</p>
        """
        return cls._send_email(email, "Your Password Was Changed - Fazlaka", html)

    @classmethod
    def send_contact_message(cls, name: str, email: str, message: str) -> bool:
        """Relay a contact-form message to the site inbox."""
        body = escape(message).replace("\n", "<br>")
        html = f"""
        <h2>New Contact Message</h2>
        <p><strong>Name:</strong> {escape(name)}</p>
        <p><strong>Email:</strong> {escape(email)}</p>
        <p><strong>Message:</strong></p>
        <p>{body}</p>
        """
        return cls._send_email(
            settings.contact_receiver_email,
            f"New contact message from {name}",
            html,
            reply_to=email,
        )
