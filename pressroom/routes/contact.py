"""
Pressroom Backend: Contact Form Route
=====================================

POST /send-email (multipart/form-data)

Fields (all required, blank counts as missing):
    nome, email, telefone, claridadFormato, flowIdea, fechaEntrega
Files:
    images: up to settings.max_contact_images image attachments

Responses:
    200 {"message": "Email sent successfully"}
    400 missing field, too many or invalid images
    500 SMTP delivery failed (provider message passed through)
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from pressroom.dependencies import get_contact_service
from pressroom.routes.news import read_upload
from pressroom.schemas.common import ErrorResponse, MessageResponse
from pressroom.schemas.contact import ContactForm
from pressroom.services.mail_service import ContactService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Contact"])


@router.post(
    "/send-email",
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing field or invalid attachments", "model": ErrorResponse},
        500: {"description": "Email delivery failed", "model": ErrorResponse},
    },
    summary="Send the contact form to the site owner",
)
async def send_email(
    nome: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    telefone: Optional[str] = Form(None),
    claridad_formato: Optional[str] = Form(None, alias="claridadFormato"),
    flow_idea: Optional[str] = Form(None, alias="flowIdea"),
    fecha_entrega: Optional[str] = Form(None, alias="fechaEntrega"),
    images: Optional[List[UploadFile]] = File(None),
    contact_service: ContactService = Depends(get_contact_service),
) -> MessageResponse:
    form = ContactForm(
        nome=nome,
        email=email,
        telefone=telefone,
        claridadFormato=claridad_formato,
        flowIdea=flow_idea,
        fechaEntrega=fecha_entrega,
    )

    attachments = []
    for upload in images or []:
        attachment = await read_upload(upload)
        if attachment is not None:
            attachments.append(attachment)

    await contact_service.send_contact_message(form, attachments)
    return MessageResponse(message="Email sent successfully")
