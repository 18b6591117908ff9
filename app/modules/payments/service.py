"""Admin approval gate for manually verified payments.

Payers submit an external mobile-money transaction code and their enrollment
or contribution waits in ``pending``. An admin checks the code by hand and
approves it here. This module is the only writer of the pending to completed
transition and of ``Project.current_amount``.

Each approval runs in one transaction:

* the status flip is a conditional ``UPDATE ... WHERE payment_status='pending'``
  so a payment is applied at most once, however often the admin retries;
* for monetary contributions the project total is incremented in SQL after
  the flip, so concurrent approvals against the same project serialize on
  the row lock and none of them is lost.

The payer is notified after the commit. Notification failures are logged and
never undo an approval.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import InvalidPaymentTypeException, ResourceNotFoundException
from app.modules.courses.models import Course, Enrollment, EnrollmentStatus
from app.modules.notifications.service import NotificationService
from app.modules.projects.models import (
    Contribution,
    ContributionType,
    PaymentStatus,
    Project,
)
from app.modules.projects.service import compute_progress

logger = logging.getLogger(__name__)


class PaymentKind(str, enum.Enum):
    ENROLLMENT = "enrollment"
    CONTRIBUTION = "contribution"

    @classmethod
    def parse(cls, value: Any) -> "PaymentKind":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidPaymentTypeException(value) from None


@dataclass
class ApprovalResult:
    kind: PaymentKind
    payment_id: int
    applied: bool
    record: Any
    payer_id: int
    notice: Optional[str] = None

    @property
    def message(self) -> str:
        label = self.kind.value.capitalize()
        return f"{label} approved" if self.applied else f"{label} already approved"


class PaymentApprovalService:
    """Lists pending payments and applies admin approvals."""

    def __init__(self, db: Session, notifier: Optional[NotificationService] = None):
        self.db = db
        self.notifier = notifier or NotificationService(db)
        self._handlers: Dict[PaymentKind, Callable[[int], ApprovalResult]] = {
            PaymentKind.ENROLLMENT: self._approve_enrollment,
            PaymentKind.CONTRIBUTION: self._approve_contribution,
        }

    def list_pending_payments(self) -> Dict[str, list]:
        """Pending enrollments and pending monetary contributions, newest first."""
        enrollments = (
            self.db.query(Enrollment)
            .options(joinedload(Enrollment.user), joinedload(Enrollment.course))
            .filter(Enrollment.payment_status == PaymentStatus.PENDING)
            .order_by(Enrollment.created_at.desc(), Enrollment.id.desc())
            .all()
        )
        contributions = (
            self.db.query(Contribution)
            .options(joinedload(Contribution.user), joinedload(Contribution.project))
            .filter(
                Contribution.payment_status == PaymentStatus.PENDING,
                Contribution.type == ContributionType.MONETARY,
            )
            .order_by(Contribution.created_at.desc(), Contribution.id.desc())
            .all()
        )
        return {"enrollments": enrollments, "contributions": contributions}

    def approve_payment(self, kind: Any, payment_id: int) -> ApprovalResult:
        """Apply one approval in a single transaction (no notification)."""
        payment_kind = kind if isinstance(kind, PaymentKind) else PaymentKind.parse(kind)
        handler = self._handlers[payment_kind]
        try:
            result = handler(payment_id)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Approval of %s %s failed; transaction rolled back",
                payment_kind.value,
                payment_id,
            )
            raise
        log = logger.info if result.applied else logger.warning
        log(
            "%s %s %s",
            payment_kind.value.capitalize(),
            payment_id,
            "approved" if result.applied else "was already approved; nothing changed",
            extra={"payment_kind": payment_kind.value, "payment_id": payment_id},
        )
        return result

    async def approve_and_notify(self, kind: Any, payment_id: int) -> ApprovalResult:
        result = self.approve_payment(kind, payment_id)
        if result.applied and result.notice:
            try:
                await self.notifier.notify(result.payer_id, result.notice)
            except Exception:
                logger.exception(
                    "Approval of %s %s committed but payer notification failed",
                    result.kind.value,
                    payment_id,
                )
        return result

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------
    def _flip_to_completed(self, model, payment_id: int, **values) -> bool:
        outcome = self.db.execute(
            update(model)
            .where(model.id == payment_id, model.payment_status == PaymentStatus.PENDING)
            .values(payment_status=PaymentStatus.COMPLETED, **values)
            .execution_options(synchronize_session=False)
        )
        return outcome.rowcount == 1

    def _add_to_project_total(self, project_id: int, amount: float) -> None:
        # Increment in SQL so the row is locked and the sum reflects every
        # committed approval, then derive progress from the locked value.
        self.db.execute(
            update(Project)
            .where(Project.id == project_id)
            .values(current_amount=func.coalesce(Project.current_amount, 0) + amount)
            .execution_options(synchronize_session=False)
        )
        project = (
            self.db.query(Project)
            .filter(Project.id == project_id)
            .populate_existing()
            .one()
        )
        project.progress = compute_progress(
            project.current_amount, project.target_amount, project.progress or 0
        )

    def _approve_enrollment(self, payment_id: int) -> ApprovalResult:
        enrollment = self.db.query(Enrollment).filter(Enrollment.id == payment_id).first()
        if not enrollment:
            raise ResourceNotFoundException("Enrollment", payment_id)

        applied = self._flip_to_completed(
            Enrollment, payment_id, status=EnrollmentStatus.ACTIVE
        )
        if applied:
            self.db.execute(
                update(Course)
                .where(Course.id == enrollment.course_id)
                .values(students_count=Course.students_count + 1)
                .execution_options(synchronize_session=False)
            )
        self.db.commit()
        self.db.refresh(enrollment)

        course_title = enrollment.course.title if enrollment.course else "your course"
        return ApprovalResult(
            kind=PaymentKind.ENROLLMENT,
            payment_id=payment_id,
            applied=applied,
            record=enrollment,
            payer_id=enrollment.user_id,
            notice=f"Your payment for '{course_title}' has been approved. Happy learning!",
        )

    def _approve_contribution(self, payment_id: int) -> ApprovalResult:
        contribution = (
            self.db.query(Contribution).filter(Contribution.id == payment_id).first()
        )
        if not contribution:
            raise ResourceNotFoundException("Contribution", payment_id)

        # The status flip takes the write lock before the project row is read.
        applied = self._flip_to_completed(Contribution, payment_id)
        if applied and contribution.type == ContributionType.MONETARY:
            self._add_to_project_total(contribution.project_id, contribution.amount or 0)
        self.db.commit()
        self.db.refresh(contribution)

        project_title = contribution.project.title if contribution.project else "the project"
        if contribution.type == ContributionType.MONETARY:
            notice = (
                f"Your contribution of {contribution.amount:g} to '{project_title}' "
                "has been approved. Thank you!"
            )
        else:
            notice = f"Your {contribution.type.value} contribution to '{project_title}' has been approved."
        return ApprovalResult(
            kind=PaymentKind.CONTRIBUTION,
            payment_id=payment_id,
            applied=applied,
            record=contribution,
            payer_id=contribution.user_id,
            notice=notice,
        )


__all__ = [
    "PaymentKind",
    "ApprovalResult",
    "PaymentApprovalService",
    "compute_progress",
]
