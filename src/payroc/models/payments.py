"""Payment request and response models."""

from datetime import date, datetime

from pydantic import Field

from payroc.models.base import BaseInput, BaseResponse, PaginatedList


class ListPaymentsRequest(BaseInput):
    """Filters for listing card payments."""

    processing_terminal_id: str | None = Field(
        default=None, alias="processingTerminalId"
    )
    order_id: str | None = Field(default=None, alias="orderId")
    operator: str | None = None
    cardholder_name: str | None = Field(default=None, alias="cardholderName")
    first6: str | None = None
    last4: str | None = None
    tender: str | None = None
    date_from: datetime | None = Field(default=None, alias="dateFrom")
    date_to: datetime | None = Field(default=None, alias="dateTo")
    settlement_date: date | None = Field(default=None, alias="settlementDate")
    before: str | None = Field(default=None, description="Cursor: items before")
    after: str | None = Field(default=None, description="Cursor: items after")
    limit: int | None = Field(default=None, ge=1, le=100)


class Payment(BaseResponse):
    """A card payment. Only the identifying fields are typed."""

    payment_id: str = Field(alias="paymentId")
    processing_terminal_id: str | None = Field(
        default=None, alias="processingTerminalId"
    )


class PaymentList(PaginatedList):
    """A page of payments."""

    data: list[Payment] = Field(default_factory=list)
