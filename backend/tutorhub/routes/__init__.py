"""API routers, mounted under ``/api/v1`` by ``tutorhub.main``."""

from typing import NoReturn

from ..core.exceptions import DomainException


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()
