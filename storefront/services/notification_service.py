# storefront/services/notification_service.py
import html
import smtplib
from decimal import Decimal
from email.message import EmailMessage
from typing import Any, Dict, Tuple

from storefront.celery_worker import celery_app
from storefront.utils.retry import smtp_retry
from storefront.utils.settings import (
    CURRENCY_SYMBOL,
    MAIL_FROM,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_USER,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _money(value: Any) -> str:
    return f"{CURRENCY_SYMBOL}{Decimal(str(value)):.2f}"


def render_order_confirmation(summary: Dict[str, Any], username: str) -> Tuple[str, str, str]:
    """
    Zwraca (subject, text, html) potwierdzenia zamowienia.
    summary pochodzi z CartSnapshot.as_summary() + order_id.
    """
    order_id = summary.get("order_id")
    subject = f"Order Confirmation #{order_id}" if order_id else "Order Confirmation"

    text_lines = [f"Hi {username},", "", "Thank you for your order!", "", "Order Details:"]
    html_items = []
    for item in summary.get("items", []):
        text_lines.append(
            f"- {item['product_name']} (size {item['size']}) "
            f"x{item['quantity']} @ {_money(item['price'])}"
        )
        html_items.append(
            "<li>"
            f"<strong>Product Name:</strong> {html.escape(str(item['product_name']))}<br>"
            f"<strong>Size:</strong> {html.escape(str(item['size']))}<br>"
            f"<strong>Quantity:</strong> {item['quantity']}<br>"
            f"<strong>Price:</strong> {_money(item['price'])}"
            "</li>"
        )

    text_lines += [
        "",
        f"Delivery Fee: {_money(summary['delivery_fee'])}",
        f"Total Amount: {_money(summary['total_amount'])}",
    ]

    note = summary.get("note")
    note_html = ""
    if note:
        text_lines.append(f"Note: {note}")
        note_html = f"<p><strong>Note:</strong> {html.escape(note)}</p>"

    body_html = (
        "<h1>Order Confirmation</h1>"
        f"<p>Hi {html.escape(username)},</p>"
        "<p>Thank you for your order!</p>"
        "<h3>Order Details:</h3>"
        f"<ul>{''.join(html_items)}</ul>"
        f"<p><strong>Delivery Fee:</strong> {_money(summary['delivery_fee'])}</p>"
        f"<p><strong>Total Amount:</strong> {_money(summary['total_amount'])}</p>"
        f"{note_html}"
    )

    return subject, "\n".join(text_lines), body_html


@smtp_retry()
def _deliver(destination: str, subject: str, text: str, body_html: str) -> None:
    msg = EmailMessage()
    msg["From"] = MAIL_FROM
    msg["To"] = destination
    msg["Subject"] = subject
    msg.set_content(text)
    msg.add_alternative(body_html, subtype="html")

    with smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=10) as smtp:
        smtp.starttls()
        if SMTP_USER:
            smtp.login(SMTP_USER, SMTP_PASSWORD)
        smtp.send_message(msg)


class NotificationService:
    """
    Serwis do wysylania powiadomien.
    Uzywa Celery do asynchronicznego przetwarzania, blad nigdy nie wychodzi do wywolujacego.
    """

    @staticmethod
    def send_order_confirmation(destination: str, summary: Dict[str, Any], username: str) -> bool:
        try:
            send_order_confirmation_task.delay(destination, summary, username)
            return True
        except Exception as e:
            # broker niedostepny itp. - zamowienie i tak zostaje
            logger.error(f"Failed to enqueue order confirmation for {destination}: {e}")
            return False


@celery_app.task(name="storefront.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(destination: str, summary: Dict[str, Any], username: str):
    subject, text, body_html = render_order_confirmation(summary, username)

    if not SMTP_HOST:
        logger.info(f"[NOTIFICATION] SMTP not configured, skipping '{subject}' to {destination}")
        return {"destination": destination, "status": "skipped"}

    try:
        _deliver(destination, subject, text, body_html)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"[NOTIFICATION] Failed to send '{subject}' to {destination}: {e}")
        return {"destination": destination, "status": "failed"}

    logger.info(f"[NOTIFICATION] Sent '{subject}' to {destination}")
    return {"destination": destination, "status": "sent"}
