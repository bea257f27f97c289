"""FundSpark — Email Pass-through Route."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import EmailStr

from fundspark.api.deps import authenticate
from fundspark.api.responses import ok
from fundspark.connectors.mail.client import MailClient, MailDeliveryError
from fundspark.core.errors import Internal, ValidationError
from fundspark.models.base import ApiModel
from fundspark.models.user_models import UserPublic

router = APIRouter(prefix="/email", tags=["Email"])


class SendEmailRequest(ApiModel):
    """Request body for POST /email/send."""

    to: Optional[EmailStr] = None
    subject: Optional[str] = None
    text: Optional[str] = None
    html: Optional[str] = None


def get_mail_client() -> MailClient:
    return MailClient()


@router.post("/send")
async def send_email(
    request: SendEmailRequest,
    user: UserPublic = Depends(authenticate),
    client: MailClient = Depends(get_mail_client),
):
    if not request.to or not request.subject or not (request.text or request.html):
        raise ValidationError("Missing required fields")
    try:
        await client.send(request.to, request.subject, request.text, request.html)
    except MailDeliveryError:
        raise Internal("Error sending email")
    return ok(message="Email sent successfully")
