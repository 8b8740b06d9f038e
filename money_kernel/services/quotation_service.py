"""
Service layer for quotations.

Quotations are numbered QTN-{year}-{n:03d} when no number is supplied.  An
update replaces the header fields and the complete item set.
"""

import datetime as dt
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from money_kernel.domain.clock import Clock, SystemClock
from money_kernel.domain.records import QuotationInfo
from money_kernel.exceptions import QuotationNotFoundError
from money_kernel.logging_config import get_logger
from money_kernel.models.project import Client
from money_kernel.models.quotation import Quotation, QuotationItem
from money_kernel.services.base import (
    BaseService,
    require_id,
    require_non_negative,
    require_text,
)
from money_kernel.services.invoice_service import next_document_number, validated_line_items

logger = get_logger("services.quotation")

DEFAULT_QUOTATION_STATUS = "Draft"


class QuotationService(BaseService):
    """Quotation writes."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def create_quotation(
        self,
        client_id: UUID,
        issue_date: dt.date,
        total_amount: Decimal | str | int,
        items: Iterable[Mapping[str, Any]] = (),
        quotation_number: str | None = None,
        valid_till: dt.date | None = None,
        status: str = DEFAULT_QUOTATION_STATUS,
        project_id: UUID | None = None,
        project_title: str | None = None,
        payment_terms: str | None = None,
        terms_conditions: str | None = None,
    ) -> QuotationInfo:
        total = require_non_negative("quotation", "total_amount", total_amount)
        status = require_text("quotation", "status", status)
        lines = validated_line_items("quotation_item", items)
        self._load(Client, client_id)

        if not quotation_number or not quotation_number.strip():
            quotation_number = next_document_number(
                self.session, Quotation.quotation_number, "QTN", self._clock.today().year
            )

        quotation = Quotation(quotation_number=quotation_number.strip())
        self._assign(
            quotation, client_id, issue_date, total, valid_till, status,
            project_id, project_title, payment_terms, terms_conditions, lines,
        )
        self.session.add(quotation)
        self.session.flush()
        logger.info(
            "quotation_created",
            extra={
                "quotation_id": str(quotation.id),
                "quotation_number": quotation.quotation_number,
            },
        )
        return quotation.to_dto()

    def update_quotation(
        self,
        quotation_id: UUID | None,
        client_id: UUID,
        issue_date: dt.date,
        total_amount: Decimal | str | int,
        items: Iterable[Mapping[str, Any]] = (),
        valid_till: dt.date | None = None,
        status: str = DEFAULT_QUOTATION_STATUS,
        project_id: UUID | None = None,
        project_title: str | None = None,
        payment_terms: str | None = None,
        terms_conditions: str | None = None,
    ) -> QuotationInfo:
        quotation_id = require_id("Quotation", quotation_id)
        total = require_non_negative("quotation", "total_amount", total_amount)
        status = require_text("quotation", "status", status)
        lines = validated_line_items("quotation_item", items)

        quotation = self._load(Quotation, quotation_id, QuotationNotFoundError)
        self._load(Client, client_id)
        self._assign(
            quotation, client_id, issue_date, total, valid_till, status,
            project_id, project_title, payment_terms, terms_conditions, lines,
        )
        self.session.flush()
        return quotation.to_dto()

    def delete_quotation(self, quotation_id: UUID | None) -> None:
        self._delete(Quotation, require_id("Quotation", quotation_id), QuotationNotFoundError)

    @staticmethod
    def _assign(
        quotation, client_id, issue_date, total, valid_till, status,
        project_id, project_title, payment_terms, terms_conditions, lines,
    ) -> None:
        quotation.client_id = client_id
        quotation.issue_date = issue_date
        quotation.total_amount = total
        quotation.valid_till = valid_till
        quotation.status = status
        quotation.project_id = project_id
        quotation.project_title = project_title
        quotation.payment_terms = payment_terms
        quotation.terms_conditions = terms_conditions
        quotation.items = [QuotationItem(**line) for line in lines]
