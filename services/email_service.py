import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

logger = logging.getLogger(__name__)


class SendGridMailer:
    """Plain-text e-mail through SendGrid."""

    def __init__(self, api_key, sender):
        self.api_key = api_key
        self.sender = sender

    def send(self, to_email, subject, body):
        if not self.api_key:
            logger.warning("SENDGRID_API_KEY not configured, skipping email to %s", to_email)
            return False

        message = Mail(
            from_email=self.sender,
            to_emails=to_email,
            subject=subject,
            plain_text_content=body
        )

        try:
            sg = SendGridAPIClient(self.api_key)
            response = sg.send(message)
            return response.status_code == 202
        except Exception as e:
            logger.error("Error enviando correo a %s: %s", to_email, e)
            return False
