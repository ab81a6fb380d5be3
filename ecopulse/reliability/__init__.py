"""
Reliability Module - Sanitization, Rate Limiting, Retries

Components:
- sanitize: Strip markup and injection characters from user text
- RateLimiter: One minimum-interval gate per client session
- RetryPolicy / with_retry: Exponential backoff for async remote calls
- RemoteCallError: Remote failure carrying an optional status code
"""

from .sanitizer import sanitize
from .rate_limiter import RateLimiter
from .retry_policy import RetryPolicy, with_retry
from .errors import RemoteCallError, is_transient_status, status_of

__all__ = [
    'sanitize',
    'RateLimiter',
    'RetryPolicy',
    'with_retry',
    'RemoteCallError',
    'is_transient_status',
    'status_of'
]
