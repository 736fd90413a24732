"""
Input Sanitization Utilities

bleach-based cleaning for post attributes and text metadata fields.
Sanitizers never reject input: they transform it into something safe to
store and render.
"""

import bleach
from typing import Optional, List
import re


# Allowed tags for rich post bodies
RICH_CONTENT_TAGS = [
    'p', 'br', 'strong', 'em', 'u', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    'blockquote', 'code', 'pre', 'hr', 'ul', 'ol', 'li', 'a', 'img',
    'table', 'thead', 'tbody', 'tr', 'th', 'td', 'div', 'span'
]

# Allowed attributes for rich content
RICH_CONTENT_ATTRS = {
    'a': ['href', 'title', 'target', 'rel'],
    'img': ['src', 'alt', 'title', 'width', 'height'],
    'code': ['class'],
    'pre': ['class'],
    'div': ['class'],
    'span': ['class'],
    'table': ['class'],
}

# Allowed protocols for URLs
ALLOWED_PROTOCOLS = ['http', 'https', 'mailto']

# script/style elements are dropped together with their content
SCRIPT_STYLE_RE = re.compile(r'<(script|style)[^>]*?>.*?</\1\s*>', re.IGNORECASE | re.DOTALL)

# Control characters other than whitespace
CONTROL_CHARS_RE = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')

# Percent-encoded octets, e.g. %0A
OCTET_RE = re.compile(r'%[a-fA-F0-9]{2}')


def sanitize_html(
    text: Optional[str],
    tags: Optional[List[str]] = None,
    attributes: Optional[dict] = None,
) -> str:
    """
    Sanitize HTML content to prevent XSS attacks.

    Args:
        text: The HTML text to sanitize
        tags: List of allowed HTML tags (default: RICH_CONTENT_TAGS)
        attributes: Dict of allowed attributes per tag (default: RICH_CONTENT_ATTRS)

    Returns:
        Sanitized HTML string
    """
    if text is None:
        return ""

    allowed_tags = tags if tags is not None else RICH_CONTENT_TAGS
    allowed_attrs = attributes if attributes is not None else RICH_CONTENT_ATTRS

    return bleach.clean(
        text,
        tags=allowed_tags,
        attributes=allowed_attrs,
        protocols=ALLOWED_PROTOCOLS,
        strip=False  # Keep tag markers for non-allowed tags
    )


def sanitize_plain_text(text: Optional[str]) -> str:
    """
    Strip all HTML tags and return plain text only.
    Useful for titles and other single-line values.
    """
    if text is None:
        return ""

    cleaned = bleach.clean(text, tags=[], strip=True)

    # Normalize whitespace
    cleaned = re.sub(r'\s+', ' ', cleaned).strip()

    return cleaned


def sanitize_text_field(text: Optional[str]) -> str:
    """
    Clean a single-line text value submitted for a metadata field.

    Drops script/style blocks with their content, every remaining tag,
    control characters and percent-encoded octets, then collapses
    whitespace and trims. Applying it twice gives the same result.

    Args:
        text: The raw submitted value

    Returns:
        Plain single-line text
    """
    if text is None:
        return ""

    # Removing a tag or an octet can join its neighbours into a new one
    # (e.g. "%4<b></b>1"), so clean until a pass changes nothing
    cleaned = _clean_text_field_once(text)
    while True:
        again = _clean_text_field_once(cleaned)
        if again == cleaned:
            return cleaned
        cleaned = again


def _clean_text_field_once(text: str) -> str:
    cleaned = SCRIPT_STYLE_RE.sub('', text)
    cleaned = CONTROL_CHARS_RE.sub('', cleaned)
    cleaned = bleach.clean(cleaned, tags=[], strip=True)
    cleaned = OCTET_RE.sub('', cleaned)
    return re.sub(r'\s+', ' ', cleaned).strip()


def sanitize_rich_content(text: Optional[str]) -> str:
    """
    Sanitize rich HTML content (post bodies).
    Allows most HTML tags for formatting.
    """
    return sanitize_html(
        text,
        tags=RICH_CONTENT_TAGS,
        attributes=RICH_CONTENT_ATTRS
    )


# Pre-configured sanitizers for post attributes
def sanitize_post_title(title: Optional[str]) -> str:
    """Sanitize post titles - strip all HTML"""
    return sanitize_plain_text(title)


def sanitize_post_body(body: Optional[str]) -> str:
    """Sanitize post body - allow rich HTML"""
    return sanitize_rich_content(body)
