"""
Input Sanitizer - Strip markup and injection characters from user text

Free-text input (search queries, insight topics) is embedded directly into
Gemini prompts, so it is cleaned before use.
"""

import re
from typing import Optional

from .reliability_config import SANITIZER_CONFIG


# "<" up to the next ">" (or to end of input when unterminated)
_TAG_PATTERN = re.compile(r'<[^>]*>?')
_STRIPPED_CHARS = re.compile('[' + re.escape(SANITIZER_CONFIG['stripped_characters']) + ']')


def sanitize(text: Optional[str]) -> str:
    """
    Sanitize free-text user input

    Steps (order matters):
    1. Remove tag-like sequences
    2. Remove ; ' " and backslash
    3. Trim surrounding whitespace
    4. Truncate to max_length characters

    Args:
        text: Raw user input (may be empty or None)

    Returns:
        Sanitized text, "" for empty input

    Example:
        >>> sanitize("<script>alert('x')</script>hello world")
        'alert(x)hello world'
    """
    if not text:
        return ""

    cleaned = _TAG_PATTERN.sub('', text)
    cleaned = _STRIPPED_CHARS.sub('', cleaned)
    cleaned = cleaned.strip()
    return cleaned[:SANITIZER_CONFIG['max_length']]
