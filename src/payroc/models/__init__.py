"""Request and response models."""

from .base import BaseInput, BaseResponse, Link, PaginatedList
from .payments import ListPaymentsRequest, Payment, PaymentList

__all__ = [
    "BaseInput",
    "BaseResponse",
    "Link",
    "ListPaymentsRequest",
    "PaginatedList",
    "Payment",
    "PaymentList",
]
