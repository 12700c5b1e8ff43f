import html
import logging
from typing import Optional, Tuple

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """
    Transactional email for the portal.
    Forwards processed receipts to an organization's destination address via SendGrid.
    """

    def __init__(self, api_key: Optional[str] = None, sender_email: Optional[str] = None):
        if api_key is None and sender_email is None:
            self.sendgrid_api_key = settings.SENDGRID_API_KEY
            self.sender_email = settings.MAIL_FROM
            self.enabled = settings.EMAIL_ENABLED
        else:
            self.sendgrid_api_key = api_key
            self.sender_email = sender_email
            self.enabled = bool(api_key and sender_email)

        if not self.enabled:
            logger.warning("📧 Email service not configured. Missing SENDGRID_API_KEY or MAIL_FROM.")
        else:
            logger.info(f"📧 Email service configured and ready. Sender: {self.sender_email}")

    # ============================================================
    # ✅ Receipt Email Content
    # ============================================================
    @staticmethod
    def build_receipt_email(
        org_name: str,
        merchant_name: Optional[str],
        amount: Optional[float],
        submitted_by: str,
        image_path: str,
    ) -> Tuple[str, str]:
        """Subject line and HTML body; user supplied values are escaped in the body."""
        merchant = merchant_name or "Unknown merchant"
        amount_text = f"{amount:.2f}" if amount is not None else "n/a"

        subject = f"Receipt from {merchant} ({amount_text}) submitted by {submitted_by}"

        html_content = f"""
        <div style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <h2>New receipt for {html.escape(org_name)}</h2>
            <p><strong>{html.escape(submitted_by)}</strong> captured a receipt.</p>
            <table style="border-collapse: collapse;">
                <tr><td><b>Merchant</b></td><td>{html.escape(merchant)}</td></tr>
                <tr><td><b>Amount</b></td><td>{amount_text}</td></tr>
                <tr><td><b>Image</b></td><td>{html.escape(image_path)}</td></tr>
            </table>
            <hr style="border:none; border-top:1px solid #eee; margin: 24px 0;">
            <p>Sent by Receipt Capture</p>
        </div>
        """
        return subject, html_content

    # ============================================================
    # ✅ Forward Receipt Email (synchronous for BackgroundTasks)
    # ============================================================
    def send_receipt_email(
        self,
        to_email: str,
        org_name: str,
        merchant_name: Optional[str],
        amount: Optional[float],
        submitted_by: str,
        image_path: str,
    ) -> bool:
        """Synchronous email send (works with FastAPI BackgroundTasks)."""
        subject, html_content = self.build_receipt_email(
            org_name, merchant_name, amount, submitted_by, image_path
        )

        if not self.enabled:
            # No SendGrid credentials: log the forward instead of sending it
            logger.info(f"📨 [Mock Email] To: {to_email}")
            logger.info(f"Subject: {subject} | Organization: {org_name}")
            return True

        try:
            message = Mail(
                from_email=self.sender_email,
                to_emails=to_email,
                subject=subject,
                html_content=html_content,
            )
            sg = SendGridAPIClient(self.sendgrid_api_key)
            response = sg.send(message)
            logger.info(f"✅ Receipt email sent to {to_email}. Status: {response.status_code}")
            return True
        except Exception as e:
            logger.exception("❌ Failed to send receipt email to %s: %s", to_email, e)
            return False


# ============================================================
# ✅ Global instance for app-wide import
# ============================================================
email_service = EmailService()
