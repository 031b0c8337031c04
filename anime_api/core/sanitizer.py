"""Free-text sanitization.

Every user-supplied or stored text field goes through :func:`sanitize` before it
is persisted or returned. The result is plain text: no tags, no comments, no
entity-encoded markup, at most ``MAX_TEXT_LEN`` characters and never empty.
"""

import html
import re

import bleach

from anime_api.models.anime import AnimeRecord

MAX_TEXT_LEN = 100
INVALID_TEXT_SENTINEL = "CARACTERES OU SIMBOLOS INPROPRIOS"

# bleach keeps the body of stripped elements; script/style bodies are code, not text.
_RAW_TEXT_ELEMENTS = re.compile(r"<(script|style)\b[^>]*>.*?(</\1\s*>|$)", re.IGNORECASE | re.DOTALL)
_WHITESPACE = re.compile(r"\s+")


def _strip_markup(value: str) -> str:
    value = _RAW_TEXT_ELEMENTS.sub("", value)
    cleaned = bleach.clean(value, tags=set(), attributes={}, strip=True, strip_comments=True)
    return html.unescape(cleaned)


def sanitize(value: str | None) -> str | None:
    """Return ``value`` as plain text, or ``None`` when ``value`` is ``None``.

    Tags are stripped before entities are decoded. Decoding can turn
    ``&lt;b&gt;`` back into live markup, so strip and decode run again until
    the text stops changing.
    """
    if value is None:
        return None
    # A pass that changes the text removes a tag, decodes one level of entities or
    # applies a one-off character normalization, so a fixed point is always reached.
    text = value
    while True:
        stripped = _strip_markup(text)
        if stripped == text:
            break
        text = stripped
    text = _WHITESPACE.sub(" ", text).strip()
    if len(text) > MAX_TEXT_LEN:
        text = text[:MAX_TEXT_LEN].rstrip()
    if not text:
        return INVALID_TEXT_SENTINEL
    return text


def sanitize_record(record: AnimeRecord | None) -> AnimeRecord | None:
    """Copy ``record`` with its name sanitized; the id is system-generated and kept as is."""
    if record is None:
        return None
    return AnimeRecord(id=record.id, name=sanitize(record.name))
