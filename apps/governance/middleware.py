import logging
import threading
import uuid

_local = threading.local()


def get_request_id(default: str | None = None) -> str | None:
    return getattr(_local, "request_id", default)


class RequestIdMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        rid = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        _local.request_id = rid
        try:
            response = self.get_response(request)
        finally:
            _local.request_id = None
        response["X-Request-Id"] = rid
        return response


class RequestIdLogFilter(logging.Filter):
    """Stamp log records with the id of the request being served."""

    def filter(self, record):
        record.request_id = get_request_id("-") or "-"
        return True
