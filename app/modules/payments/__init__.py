"""Payments domain package exports."""

from .service import ApprovalResult, PaymentApprovalService, PaymentKind, compute_progress

__all__ = ["ApprovalResult", "PaymentApprovalService", "PaymentKind", "compute_progress"]
