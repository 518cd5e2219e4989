# backend/tutorhub/core/exceptions.py
"""
Domain-specific exceptions for the tutorhub platform.

Server-side exceptions convert to HTTP errors at the API layer. The
booking-flow exceptions below them are raised by the client-side booking
core and carry enough context for the UI to show an actionable message.
"""

from typing import Any, Dict, Mapping, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Default conversion to HTTPException (override in subclasses)."""
        return self._http(status.HTTP_500_INTERNAL_SERVER_ERROR)

    def _http(self, status_code: int) -> HTTPException:
        return HTTPException(
            status_code=status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    def to_http_exception(self) -> HTTPException:
        return self._http(status.HTTP_400_BAD_REQUEST)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    def to_http_exception(self) -> HTTPException:
        return self._http(status.HTTP_404_NOT_FOUND)


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    def to_http_exception(self) -> HTTPException:
        return self._http(status.HTTP_409_CONFLICT)


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    def to_http_exception(self) -> HTTPException:
        return self._http(HTTP_422_UNPROCESSABLE)


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class BookingConflictException(ConflictException):
    """Raised when a booking conflicts with existing bookings."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot conflicts with an existing booking",
            code="BOOKING_CONFLICT",
            details=details or {},
        )


class OutsideAvailabilityException(BusinessRuleException):
    """Raised when a requested interval is not covered by the teacher's availability."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="OUTSIDE_AVAILABILITY", details=details or {})


class PaymentAlreadySubmittedException(ConflictException):
    """Raised when a booking already carries different payment evidence."""

    def __init__(self, booking_id: str):
        super().__init__(
            message="Payment evidence has already been submitted for this booking",
            code="PAYMENT_ALREADY_SUBMITTED",
            details={"booking_id": booking_id},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """


# Booking flow (client core) exceptions


class BookingFlowError(DomainException):
    """Base class for errors raised by the client-side booking flow."""


class PaymentValidationError(BookingFlowError):
    """Local payment-form errors. Resolved client-side, never sent to the network."""

    def __init__(self, errors: Mapping[str, str]):
        self.errors = dict(errors)
        first = next(iter(self.errors.values()), "Invalid payment details")
        super().__init__(message=first, code="PAYMENT_VALIDATION", details={"errors": self.errors})


class ReceiptFileError(BookingFlowError):
    """A single receipt file was rejected; other staged files are unaffected."""

    def __init__(self, file_name: str, reason: str):
        self.file_name = file_name
        self.reason = reason
        super().__init__(
            message=f"{file_name}: {reason}",
            code="RECEIPT_FILE_REJECTED",
            details={"file_name": file_name, "reason": reason},
        )


class PendingBookingError(BookingFlowError):
    """A slot was selected while another booking is still pending in the session."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="You already have a pending booking. Please complete or cancel it first.",
            code="EXISTING_PENDING_BOOKING",
            details=details,
        )


class InvalidTransitionError(BookingFlowError):
    """An operation is not allowed in the session's current state."""

    def __init__(self, operation: str, state: str):
        super().__init__(
            message=f"Cannot {operation} while the booking is {state}",
            code="INVALID_TRANSITION",
            details={"operation": operation, "state": state},
        )


class SlotConflictError(BookingFlowError):
    """The chosen slot was taken by someone else. Recoverable by re-picking a time."""

    def __init__(self, message: Optional[str] = None, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message
            or "This time slot was just booked by another student. Please choose another time.",
            code="SLOT_CONFLICT",
            details=details,
        )


class BookingError(BookingFlowError):
    """Creating the booking failed for a reason other than a slot conflict."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        super().__init__(message=message, code="BOOKING_FAILED", details=details)


class PaymentError(BookingFlowError):
    """Attaching payment evidence to an existing booking failed."""

    def __init__(
        self,
        message: str,
        *,
        booking_id: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.booking_id = booking_id
        self.status_code = status_code
        super().__init__(message=message, code="PAYMENT_FAILED", details=details)


class PartialSubmissionError(PaymentError):
    """
    The booking was created but its payment evidence was not attached.

    The slot is now reserved for the student; the payment form must be
    resubmitted against ``booking_id``.
    """

    def __init__(
        self,
        booking_id: str,
        *,
        cause: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            "Your time slot is reserved, but we could not attach your payment proof. "
            "Please resubmit your payment details.",
            booking_id=booking_id,
            status_code=status_code,
            details={"booking_id": booking_id, "cause": cause, **(details or {})},
        )
        self.code = "PARTIAL_SUBMISSION"
