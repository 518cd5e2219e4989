"""Application-wide constants for the tutorhub platform."""

from __future__ import annotations

BRAND_NAME = "tutorhub"

# Bank accounts students transfer lesson fees to
KNOWN_BANKS = (
    "Al Rajhi Bank",
    "Saudi National Bank (SNB)",
    "Riyad Bank",
)
OTHER_BANK = "Other"

# Payment form constraints
MIN_TRANSACTION_ID_LENGTH = 3
MIN_ACCOUNT_NUMBER_LENGTH = 8
MAX_NOTES_LENGTH = 1000

# Receipt uploads
MAX_RECEIPT_BYTES = 10 * 1024 * 1024
RECEIPT_PDF_CONTENT_TYPE = "application/pdf"
RECEIPT_PREVIEW_SIZE = (200, 200)

# Booking horizon (days ahead a student may book)
DEFAULT_BOOKING_HORIZON_DAYS = 30

# Phrases the booking store uses when a slot was taken by someone else
CONFLICT_PHRASES = (
    "already booked",
    "no longer available",
    "conflicts with an existing booking",
    "just been booked",
)
