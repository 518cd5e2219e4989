# backend/tutorhub/booking_flow/payment_proof.py
"""
Payment Proof Collector.

Holds the payment form for one draft, stages receipt files in memory and
turns the form into an immutable ``PaymentSubmission`` once every field
is valid. Nothing is uploaded or saved here.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
import logging
from typing import Any, Callable, Dict, List, Optional, cast

from ..core.constants import (
    KNOWN_BANKS,
    MAX_RECEIPT_BYTES,
    MIN_ACCOUNT_NUMBER_LENGTH,
    MIN_TRANSACTION_ID_LENGTH,
    OTHER_BANK,
)
from ..core.exceptions import PaymentValidationError, ReceiptFileError
from ..core.receipt_files import ReceiptFileRejected, build_preview, detect_receipt_kind
from .models import PaymentForm, PaymentSubmission, StagedReceipt

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "transaction_id",
    "amount",
    "payment_date",
    "bank_name",
    "account_number",
    "notes",
)
BANK_CHOICES = KNOWN_BANKS + (OTHER_BANK,)


def _coerce_amount(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        amount = None
    if amount is None or not amount.is_finite():
        raise PaymentValidationError({"amount": "Please enter a valid amount"})
    return amount


def _coerce_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise PaymentValidationError({"payment_date": "Please enter a valid date"}) from None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


class PaymentProofCollector:
    """Validates and packages bank-transfer evidence for one booking price."""

    def __init__(
        self,
        form: Optional[PaymentForm] = None,
        *,
        max_file_bytes: int = MAX_RECEIPT_BYTES,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.form = form or PaymentForm()
        self.max_file_bytes = max_file_bytes
        self._today = today or date.today

    def prefill(self, price: Decimal) -> None:
        """Default the amount to the price and the date to today, keeping anything typed."""
        if self.form.amount is None:
            self.form.amount = price
        if self.form.payment_date is None:
            self.form.payment_date = self._today()

    def update_field(self, name: str, value: Any) -> None:
        if name not in EDITABLE_FIELDS:
            raise PaymentValidationError({name: f"Unknown payment field: {name}"})
        if name == "amount":
            self.form.amount = _coerce_amount(value)
        elif name == "payment_date":
            self.form.payment_date = _coerce_date(value)
        else:
            setattr(self.form, name, _text(value))

    def add_receipt(
        self, file_name: str, data: bytes, content_type: Optional[str] = None
    ) -> StagedReceipt:
        """
        Stage one receipt.

        Raises:
            ReceiptFileError: For this file only; already staged files are kept
        """
        try:
            kind = detect_receipt_kind(data, content_type, max_bytes=self.max_file_bytes)
        except ReceiptFileRejected as exc:
            logger.info("Receipt %s rejected: %s", file_name, exc)
            raise ReceiptFileError(file_name, str(exc)) from None

        preview = build_preview(data) if kind.is_image else None
        receipt = StagedReceipt(
            file_name=file_name, content_type=kind.content_type, data=data, preview=preview
        )
        self.form.receipts.append(receipt)
        return receipt

    def remove_receipt(self, receipt_id: str) -> bool:
        before = len(self.form.receipts)
        self.form.receipts = [r for r in self.form.receipts if r.id != receipt_id]
        return len(self.form.receipts) != before

    @property
    def receipts(self) -> List[StagedReceipt]:
        return list(self.form.receipts)

    def validate(self, price: Decimal) -> Dict[str, str]:
        """Field -> message for every failing rule. Empty when the form is valid."""
        form = self.form
        errors: Dict[str, str] = {}

        transaction_id = form.transaction_id.strip()
        if not transaction_id:
            errors["transaction_id"] = "Transaction ID is required"
        elif len(transaction_id) < MIN_TRANSACTION_ID_LENGTH:
            errors["transaction_id"] = (
                f"Transaction ID must be at least {MIN_TRANSACTION_ID_LENGTH} characters"
            )

        if form.amount is not None and not form.amount.is_finite():
            errors["amount"] = "Please enter a valid amount"
        elif form.amount is None or form.amount <= 0:
            errors["amount"] = "Amount must be greater than 0"
        elif form.amount != price:
            errors["amount"] = f"Amount must be exactly {price:.2f}"

        if form.payment_date is None:
            errors["payment_date"] = "Payment date is required"
        elif form.payment_date < self._today():
            errors["payment_date"] = "Payment date cannot be in the past"

        if not form.bank_name.strip():
            errors["bank_name"] = "Please select a bank"
        elif form.bank_name.strip() not in BANK_CHOICES:
            errors["bank_name"] = "Please select a bank from the list"

        account_number = form.account_number.strip()
        if account_number and len(account_number) < MIN_ACCOUNT_NUMBER_LENGTH:
            errors["account_number"] = (
                f"Account number must be at least {MIN_ACCOUNT_NUMBER_LENGTH} characters"
            )

        return errors

    def build_submission(self, price: Decimal) -> PaymentSubmission:
        """
        Package the form for submission.

        Raises:
            PaymentValidationError: With every failing field, before any network call
        """
        errors = self.validate(price)
        if errors:
            raise PaymentValidationError(errors)

        form = self.form
        return PaymentSubmission(
            transaction_id=form.transaction_id.strip(),
            amount=cast(Decimal, form.amount),
            payment_date=cast(date, form.payment_date),
            bank_name=form.bank_name.strip(),
            account_number=form.account_number.strip() or None,
            notes=form.notes.strip() or None,
        )
