"""
Utilities for rendering tokens as printable, single-line strings.
"""

import unicodedata


def escape_ctrl_chars(s: str) -> str:
    """Replace all Unicode control and format characters with escape sequences."""
    cleaned = []
    for c in s:
        # category codes vary: Cc, Cf, Cn etc. so check the first letter
        if unicodedata.category(c)[0] != "C":
            cleaned.append(c)
        else:
            cleaned.append(f"\\u{ord(c):04x}")
    return "".join(cleaned)


def render_token(token: str) -> str:
    """Render a token for display; whitespace-only tokens are shown quoted."""
    rendered = escape_ctrl_chars(token)
    if rendered.isspace():
        return repr(rendered)
    return rendered


__all__ = ["escape_ctrl_chars", "render_token"]
