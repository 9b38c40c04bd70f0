"""
Text sanitization for user-supplied display strings.
"""

import html
from typing import Any


def sanitize_text(value: Any) -> Any:
    """Trim and HTML-escape a string. Non-strings pass through untouched."""
    if not isinstance(value, str):
        return value

    return html.escape(value.strip())
