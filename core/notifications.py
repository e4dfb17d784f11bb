# core/notifications.py
import requests
from typing import List, Optional
from core.config import settings
from core.logging_config import logger


# -----------------------------------------------------
# 📧 Send email through the mailer microservice
# -----------------------------------------------------
def send_email(
    to: str,
    subject: str,
    html: str,
    from_: Optional[str] = None,
    attachments: Optional[List[dict]] = None,
) -> bool:
    """
    POST {MAILER_URL}/api/send-email.

    Fire-and-forget: failures are logged and reported as False, never raised.

    Args:
        to: Recipient email address
        subject: Email subject
        html: HTML body
        from_: Sender, defaults to settings.MAILER_FROM
        attachments: List of dicts with 'filename' and 'content' or 'path'
    """
    mailer_url = settings.MAILER_URL
    if not mailer_url:
        logger.warning("Mailer URL not configured — skipping email.")
        return False

    if not to:
        logger.warning("No recipient specified — skipping email.")
        return False

    payload = {
        "to": to,
        "subject": subject,
        "html": html,
        "from": from_ or settings.MAILER_FROM,
    }
    if attachments:
        payload["attachments"] = attachments

    try:
        response = requests.post(
            f"{mailer_url.rstrip('/')}/api/send-email",
            json=payload,
            timeout=settings.MAILER_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Email to {to} failed: {e}")
        return False

    logger.info(f"Email sent to {to} (status {response.status_code})")
    return True
