import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

from clientdash.core.config import settings
from clientdash.core.logging import get_logger

logger = get_logger(__name__)


def build_reset_link(token: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/reset-password/{token}"


def smtp_configured() -> bool:
    return bool(settings.SMTP_SERVER and settings.SMTP_USERNAME and settings.SMTP_PASSWORD)


def deliver_reset_link(email: str, token: str) -> dict:
    """
    Send the password reset link by SMTP, or simulate delivery when SMTP is
    not configured (development).

    Runs as a background task after the response is sent, so failures are
    logged and reported in the return value instead of raised.
    """
    link = build_reset_link(token)

    if not smtp_configured():
        logger.info(f"Simulated password reset email to {email}")
        logger.debug(f"Reset link: {link}")
        return {"sent": True, "simulated": True}

    from_email = settings.SMTP_FROM_EMAIL or settings.SMTP_USERNAME
    msg = MIMEMultipart()
    msg['From'] = f"{settings.SMTP_FROM_NAME} <{from_email}>"
    msg['To'] = email
    msg['Subject'] = "Password reset"

    body = f"""
    <html>
        <body>
            <h2>Password reset</h2>
            <p>You asked to reset your password.</p>
            <p><a href="{link}">Choose a new password</a></p>
            <p>This link expires in {settings.RESET_TOKEN_EXPIRE_MINUTES} minutes.</p>
            <p>If you did not ask for this, ignore this email.</p>
        </body>
    </html>
    """
    msg.attach(MIMEText(body, 'html'))

    try:
        with smtplib.SMTP(settings.SMTP_SERVER, settings.SMTP_PORT) as server:
            server.starttls()
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.sendmail(from_email, email, msg.as_string())
        logger.info(f"Password reset email sent to {email}")
        return {"sent": True, "simulated": False}
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send password reset email to {email}: {e}")
        return {"sent": False, "error": str(e)}
