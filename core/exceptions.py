from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class PharmacyError(APIException):
    """Base for errors raised by the inventory/sales/order core.

    Carries a plain message plus optional structured extras (field name,
    conflicting medicine, shortages) that the API handler renders verbatim.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed."
    default_code = "pharmacy_error"

    def __init__(self, message: str | None = None, *, code: str | None = None, **extra):
        self.message = str(message or self.default_detail)
        self.code = code or self.default_code
        self.extra = extra
        super().__init__(self.message, self.code)

    def as_payload(self) -> dict:
        payload = {"detail": self.message, "code": self.code}
        payload.update(self.extra)
        return payload


class ParseError(PharmacyError):
    default_detail = "Malformed quantity."
    default_code = "parse_error"


class ValidationError(PharmacyError):
    default_detail = "Invalid input."
    default_code = "invalid"

    @property
    def field(self) -> str | None:
        return self.extra.get("field")


class InsufficientStockError(PharmacyError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Insufficient stock."
    default_code = "insufficient_stock"

    def __init__(self, message: str | None = None, *, shortages=None, **extra):
        super().__init__(message, shortages=list(shortages or []), **extra)

    @property
    def shortages(self) -> list[dict]:
        return self.extra["shortages"]


class NotFoundError(PharmacyError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


def api_exception_handler(exc, context):
    if isinstance(exc, PharmacyError):
        logger.info("%s: %s", exc.__class__.__name__, exc.message)
        return Response(exc.as_payload(), status=exc.status_code)
    return exception_handler(exc, context)
