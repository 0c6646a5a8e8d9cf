import re
from typing import Optional

_non_digit_re = re.compile(r"\D", re.ASCII)
_whitespace_re = re.compile(r"\s")


def digits_only(text: Optional[str]) -> str:
    """Drop every non-digit character"""
    return _non_digit_re.sub("", text or "")


def strip_whitespace(text: Optional[str]) -> str:
    return _whitespace_re.sub("", text or "")


def sanitize_input(text: str, max_length: Optional[int] = None) -> str:
    """Sanitize user input"""
    if not text:
        return ""
    
    # Remove leading/trailing whitespace
    text = text.strip()
    
    # Limit length if specified
    if max_length:
        text = text[:max_length]
    
    return text
