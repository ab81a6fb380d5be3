"""
Remote call failures with an optional HTTP-style status code
"""

from typing import Optional


class RemoteCallError(Exception):
    """
    Failure of an outbound remote call

    status is the HTTP status code reported by the backend, or None when the
    failure never produced one (network errors, malformed responses).
    A missing status is treated as transient by the retry policy.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status

    def __repr__(self) -> str:
        return f"RemoteCallError({str(self)!r}, status={self.status})"


def is_transient_status(status: Optional[int]) -> bool:
    """Server-side (5xx) or unknown failures are worth retrying; 0 counts as unknown"""
    return not (status and status < 500)


def status_of(error: BaseException) -> Optional[int]:
    """
    Extract the status code carried by an error, if any

    Checks RemoteCallError.status first, then an attached HTTP response
    (requests/httpx HTTPError style).
    """
    if isinstance(error, RemoteCallError):
        return error.status

    response = getattr(error, 'response', None)
    if response is not None:
        status_code = getattr(response, 'status_code', None)
        if isinstance(status_code, int):
            return status_code

    return None
