import resend
import logging
from datetime import datetime

import cloudinary.uploader
from django.conf import settings
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


def upload_payment_proof(file, member):
    """Store a proof of transfer and return its public URL."""
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    upload_result = cloudinary.uploader.upload(
        file,
        resource_type="auto",
        public_id=f"payment_proofs/{member.member_no}_{timestamp}",
    )
    return upload_result["secure_url"]


def send_member_email(member, subject, template, context):
    if not getattr(settings, "PAYMENT_NOTIFICATIONS_ENABLED", False) or not member.email:
        return None

    try:
        email_body = render_to_string(
            template,
            {
                "member": member,
                "current_year": datetime.now().year,
                **context,
            },
        )
        params = {
            "from": settings.PAYMENT_NOTIFICATIONS_FROM,
            "to": [member.email],
            "subject": subject,
            "html": email_body,
        }
        response = resend.Emails.send(params)
        logger.info(f"Email sent to {member.email} with response: {response}")
        return response

    except Exception as e:
        logger.error(f"Error sending email to {member.email}: {str(e)}")
        return None


def send_payment_confirmation_email(member, payment):
    return send_member_email(
        member, "Payment Confirmation", "payment_confirmation.html", {"payment": payment}
    )


def send_general_payment_confirmation_email(member, amount, payments, credit=None):
    """One receipt for a general payment, listing every obligation it funded."""
    return send_member_email(
        member,
        "Payment Confirmation",
        "general_payment_confirmation.html",
        {
            "amount": amount,
            "payments": payments,
            "credit": credit,
        },
    )
