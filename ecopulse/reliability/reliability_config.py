"""
Reliability Configuration

All reliability parameters for outbound Gemini calls are configured here,
not hardcoded in logic.

Configuration includes:
- Session rate limit (minimum spacing between news requests)
- Retry policy (exponential backoff for transient failures)
- Input sanitization limits
"""

from typing import Dict, Any


# ============================================================================
# RATE LIMITING CONFIGURATION
# ============================================================================

RATE_LIMIT_CONFIG: Dict[str, float] = {
    # One shared gate per client session
    'min_interval': 5.0              # Seconds between accepted requests
}


# ============================================================================
# RETRY POLICY CONFIGURATION
# ============================================================================

RETRY_CONFIG: Dict[str, Any] = {
    'max_retries': 3,                # Retries after the first attempt
    'base_delay': 1.0,               # 1s initial delay
    'exponential_base': 2            # 1s, 2s, 4s
}


# ============================================================================
# SANITIZER CONFIGURATION
# ============================================================================

SANITIZER_CONFIG: Dict[str, Any] = {
    'max_length': 100,
    'stripped_characters': ";'\"\\"
}


# ============================================================================
# VALIDATION
# ============================================================================

def validate_configs():
    """
    Validate all reliability configurations

    Raises:
        ValueError: If configuration invalid
    """
    if RATE_LIMIT_CONFIG['min_interval'] <= 0:
        raise ValueError("Rate limit min_interval must be positive")

    if RETRY_CONFIG['max_retries'] < 0:
        raise ValueError("Max retries must be non-negative")
    if RETRY_CONFIG['base_delay'] <= 0:
        raise ValueError("Base delay must be positive")
    if RETRY_CONFIG['exponential_base'] < 1:
        raise ValueError("Exponential base must be >= 1")

    if SANITIZER_CONFIG['max_length'] <= 0:
        raise ValueError("Sanitizer max_length must be positive")


# Run validation on import
validate_configs()
