"""tutorhub: lesson booking with bank-transfer payment confirmation."""

__version__ = "0.1.0"
