"""FundSpark — Payment Routes."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from fundspark.api.deps import authenticate
from fundspark.api.responses import ok
from fundspark.database import get_session
from fundspark.models.payment_models import PaymentCreate
from fundspark.models.user_models import UserPublic
from fundspark.stores import payment_store

router = APIRouter(prefix="/payment", tags=["Payments"])


@router.post("", status_code=201)
def process_payment(
    request: PaymentCreate,
    user: UserPublic = Depends(authenticate),
    session: Session = Depends(get_session),
):
    """Simulate a pledge and credit it to the campaign."""
    payment, campaign = payment_store.process_payment(session, request, user.id)
    return ok({"payment": payment, "campaign": campaign}, "Payment processed successfully")


@router.get("/my-payments")
def my_payments(
    user: UserPublic = Depends(authenticate),
    session: Session = Depends(get_session),
):
    return ok({"payments": payment_store.list_my_payments(session, user.id)})


@router.get("/campaign/{campaign_id}")
def campaign_payments(
    campaign_id: int,
    user: UserPublic = Depends(authenticate),
    session: Session = Depends(get_session),
):
    return ok({"payments": payment_store.list_campaign_payments(session, campaign_id)})
