"""
Booking notification emails with optional configuration
"""
import logging
from typing import Optional
from fastapi_mail import FastMail, MessageSchema, ConnectionConfig

from bookflow.core.config import settings

logger = logging.getLogger(__name__)

EMAIL_ENABLED = settings.email_enabled

# Only create config if email is enabled
if EMAIL_ENABLED:
    try:
        conf = ConnectionConfig(
            MAIL_USERNAME=settings.MAIL_USERNAME,
            MAIL_PASSWORD=settings.MAIL_PASSWORD,
            MAIL_FROM=settings.MAIL_FROM,
            MAIL_PORT=settings.MAIL_PORT,
            MAIL_SERVER=settings.MAIL_SERVER,
            MAIL_STARTTLS=settings.MAIL_USE_TLS,
            MAIL_SSL_TLS=False,
            USE_CREDENTIALS=True,
            VALIDATE_CERTS=True
        )
        fm: Optional[FastMail] = FastMail(conf)
        logger.info("Email service initialized successfully")
    except Exception as e:
        EMAIL_ENABLED = False
        fm = None
        logger.warning(f"Email service initialization failed: {e}")
else:
    fm = None
    logger.warning("Email service disabled - missing configuration")


async def send_booking_confirmation(email: str, booking: dict) -> bool:
    """
    Send booking confirmation to the client
    Returns True if sent successfully, False otherwise
    """
    if not EMAIL_ENABLED or fm is None:
        logger.warning(f"Booking confirmation not sent to {email} - service disabled")
        return False

    try:
        status_line = (
            "Your appointment is confirmed."
            if booking.get("status") == "confirmed"
            else "Your appointment request was received and is waiting for confirmation."
        )
        message = MessageSchema(
            subject=f"Appointment at {booking.get('organizationName', '')}",
            recipients=[email],
            body=f"""
            <html>
                <body>
                    <h2>Hello {booking.get('clientName', '')}</h2>
                    <p>{status_line}</p>
                    <p>Service: {booking.get('serviceName') or 'N/A'}</p>
                    <p>Date: {booking.get('date')} at {booking.get('time')}</p>
                    <p>Duration: {booking.get('duration')} minutes</p>
                </body>
            </html>
            """,
            subtype="html"
        )

        await fm.send_message(message)
        logger.info(f"Booking confirmation sent to {email}")
        return True

    except Exception as e:
        logger.error(f"Failed to send booking confirmation to {email}: {str(e)}")
        return False


async def send_booking_cancellation(email: str, booking: dict) -> bool:
    """
    Send cancellation notice to the client
    Returns True if sent successfully, False otherwise
    """
    if not EMAIL_ENABLED or fm is None:
        logger.warning(f"Cancellation email not sent to {email} - service disabled")
        return False

    try:
        book_again_url = f"{settings.FRONTEND_URL}/book/{booking.get('organizationId')}"
        message = MessageSchema(
            subject=f"Appointment cancelled - {booking.get('organizationName', '')}",
            recipients=[email],
            body=f"""
            <html>
                <body>
                    <h2>Appointment cancelled</h2>
                    <p>Your appointment on {booking.get('date')} at {booking.get('time')} was cancelled.</p>
                    <p>Reason: {booking.get('reason') or 'Not specified'}</p>
                    <p>You can book a new time here: <a href="{book_again_url}">{book_again_url}</a></p>
                </body>
            </html>
            """,
            subtype="html"
        )

        await fm.send_message(message)
        logger.info(f"Cancellation email sent to {email}")
        return True

    except Exception as e:
        logger.error(f"Failed to send cancellation email to {email}: {str(e)}")
        return False
