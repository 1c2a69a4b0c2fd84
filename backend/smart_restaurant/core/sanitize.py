"""Text sanitization utilities to prevent XSS attacks."""

import html


def sanitize_text(value: str | None) -> str | None:
    """Sanitize user-supplied free text to prevent stored XSS.

    HTML-escapes dangerous characters (&, <, >, ", ') so that
    user input is safe to render in a browser without being
    interpreted as HTML/JavaScript.
    """
    if value is None:
        return None
    return html.escape(value.strip(), quote=True)
