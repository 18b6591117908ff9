"""Admin router: manual payment verification.

Every endpoint depends on ``get_current_admin`` so authorization is checked
before any payment row is read.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.modules.courses.schemas import EnrollmentOut
from app.modules.notifications import ConnectionRegistry, NotificationService, get_registry
from app.modules.payments import PaymentApprovalService, PaymentKind
from app.modules.payments.schemas import (
    ApprovePaymentRequest,
    ApprovePaymentResponse,
    PendingContributionOut,
    PendingEnrollmentOut,
    PendingPaymentsOut,
)
from app.modules.projects.schemas import ContributionOut
from app.modules.users import User
from app.oauth2 import get_current_admin

router = APIRouter(prefix="/admin", tags=["Admin"])


def get_approval_service(
    db: Session = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_registry),
) -> PaymentApprovalService:
    return PaymentApprovalService(db, notifier=NotificationService(db, registry))


@router.get("/pending-payments", response_model=PendingPaymentsOut)
def pending_payments(
    _: User = Depends(get_current_admin),
    service: PaymentApprovalService = Depends(get_approval_service),
):
    pending = service.list_pending_payments()
    return PendingPaymentsOut(
        enrollments=[PendingEnrollmentOut.model_validate(e) for e in pending["enrollments"]],
        contributions=[
            PendingContributionOut.model_validate(c) for c in pending["contributions"]
        ],
    )


@router.post("/approve-payment", response_model=ApprovePaymentResponse)
async def approve_payment(
    payload: ApprovePaymentRequest,
    admin: User = Depends(get_current_admin),
    service: PaymentApprovalService = Depends(get_approval_service),
):
    """Approve one pending enrollment or contribution.

    Re-approving an already completed payment is a no-op reported with
    ``applied: false``.
    """
    result = await service.approve_and_notify(payload.type, payload.id)
    if result.kind is PaymentKind.ENROLLMENT:
        data = EnrollmentOut.model_validate(result.record)
    else:
        data = ContributionOut.model_validate(result.record)
    return ApprovePaymentResponse(
        message=result.message, applied=result.applied, data=data.model_dump(mode="json")
    )
