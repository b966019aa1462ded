"""
Pressroom Backend: Contact Mail
===============================

What:  Turns a submitted contact form into an email to the site owner.
How:   ContactService validates the form and attachments and builds an
       `email.message.EmailMessage`; a Mailer delivers it. SMTPMailer uses
       aiosmtplib so delivery never blocks the event loop.

Message layout:
    From:      configured sender (SMTP account)
    To:        settings.contact_recipient
    Reply-To:  the visitor's email, so answering goes straight to them
    Body:      one "Label: value" line per form field
    Parts:     each uploaded image as an attachment

No retries: an SMTP failure is reported to the caller as a 500 with the
provider's message.
"""

import logging
from abc import ABC, abstractmethod
from email.message import EmailMessage
from typing import List, Optional

import aiosmtplib

from pressroom.exceptions import UpstreamServiceError, ValidationError
from pressroom.schemas.contact import ContactForm
from pressroom.schemas.news import ImageUpload
from pressroom.services.storage_base import validate_image_upload

logger = logging.getLogger(__name__)

# Body labels, in display order. The site audience is Spanish-speaking.
BODY_LABELS = (
    ("name", "Nombre"),
    ("email", "Email"),
    ("phone", "Teléfono"),
    ("format_clarity", "Claridad del formato"),
    ("idea_flow", "Flow de la idea"),
    ("due_date", "Fecha de entrega"),
)


class Mailer(ABC):
    """Delivers a fully built message. Failures raise UpstreamServiceError("mail")."""

    @abstractmethod
    async def send(self, message: EmailMessage) -> None:
        ...


class SMTPMailer(Mailer):

    def __init__(
        self,
        hostname: str,
        port: int,
        username: Optional[str] = None,
        password: Optional[str] = None,
        start_tls: bool = True,
        timeout: float = 30.0,
    ):
        self.hostname = hostname
        self.port = port
        self.username = username
        self.password = password
        self.start_tls = start_tls
        self.timeout = timeout

    async def send(self, message: EmailMessage) -> None:
        try:
            await aiosmtplib.send(
                message,
                hostname=self.hostname,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                start_tls=self.start_tls,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("SMTP delivery via %s:%s failed: %s", self.hostname, self.port, e)
            raise UpstreamServiceError(service="mail", message=f"Error sending email: {e}")

        logger.info("Mail delivered to %s", message["To"])


class ContactService:

    def __init__(
        self,
        mailer: Mailer,
        recipient: str,
        sender: str,
        subject: str,
        max_images: int,
        max_file_size: int,
    ):
        self.mailer = mailer
        self.recipient = recipient
        self.sender = sender
        self.subject = subject
        self.max_images = max_images
        self.max_file_size = max_file_size

    def build_message(self, form: ContactForm, images: List[ImageUpload]) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = self.recipient
        message["Reply-To"] = form.email.strip()
        message["Subject"] = self.subject

        lines = [f"{label}: {getattr(form, field)}" for field, label in BODY_LABELS]
        message.set_content("\n".join(lines) + "\n")

        for image in images:
            maintype, _, subtype = image.content_type.partition("/")
            message.add_attachment(
                image.content,
                maintype=maintype,
                subtype=subtype or "octet-stream",
                filename=image.filename,
            )
        return message

    async def send_contact_message(self, form: ContactForm, images: List[ImageUpload]) -> None:
        """
        Validate the submission and hand the message to the mailer.

        Raises:
            ValidationError:       missing/blank field, bad email, too many or invalid images
            UpstreamServiceError:  delivery failed
        """
        missing = form.missing_fields()
        if missing:
            raise ValidationError(
                message="All form fields are required",
                context={"missing": missing},
            )
        if not form.has_valid_email():
            raise ValidationError(message="Invalid email address", field="email")

        if len(images) > self.max_images:
            raise ValidationError(
                message=f"At most {self.max_images} images can be attached",
                field="images",
                context={"received": len(images)},
            )
        for image in images:
            validate_image_upload(image, self.max_file_size)

        await self.mailer.send(self.build_message(form, images))
        logger.info("Contact message from %s sent with %d attachment(s)", form.email, len(images))
