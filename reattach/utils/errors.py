import json
import kubernetes_asyncio

_NOT_FOUND = "notfound"
_CONFLICT = "conflict"


class ReattachError(Exception):
    """Base error raised by the reattach operator."""


class UnsupportedWorkloadError(ReattachError):
    """Raised when a workload kind cannot be scaled."""

    def __init__(self, kind: str, name: str = None):
        self.kind = kind
        self.name = name
        super().__init__(f"unsupported workload type {kind}" + (f" ({name})" if name else ""))


def _error_reason(ex: kubernetes_asyncio.client.ApiException) -> str:
    try:
        err = json.loads(ex.body) if ex.body else {}
    except (json.JSONDecodeError, TypeError):
        return ""
    if not isinstance(err, dict):
        return ""
    return (err.get("reason") or "").lower()


def not_found_error(ex: Exception) -> bool:
    if not isinstance(ex, kubernetes_asyncio.client.ApiException):
        return False
    return ex.status == 404 or _error_reason(ex) == _NOT_FOUND


def conflict_error(ex: Exception) -> bool:
    if not isinstance(ex, kubernetes_asyncio.client.ApiException):
        return False
    return ex.status == 409 or _error_reason(ex) == _CONFLICT


def describe_error(ex: Exception) -> str:
    """Short, log friendly description of an exception."""
    if not isinstance(ex, kubernetes_asyncio.client.ApiException):
        return f"{type(ex).__name__}: {ex}"

    error_msg = f"Kubernetes API error ({ex.status}): {ex.reason}"
    try:
        if ex.body:
            body = json.loads(ex.body)
            if "message" in body:
                error_msg = f"{error_msg} - {body['message']}"
    except (json.JSONDecodeError, AttributeError, TypeError):
        pass
    return error_msg
