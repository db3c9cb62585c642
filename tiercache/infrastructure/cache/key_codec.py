"""
Storage Key Derivation

Turns a logical cache key into the key actually sent to the backend.

Most backends accept any string, so the storage key is simply
``prefix + logical_key``. Backends that map keys onto file names report
``requires_safe_keys`` and get a sanitized key instead: every character that
is illegal in a path segment is replaced, and each reserved character gets
its own placeholder so two keys that differ only in a reserved character
never land on the same file.
"""

import re
from html import unescape
from html.entities import codepoint2name
from urllib.parse import quote

from tiercache.core.config.constants import RESERVED_KEY_CHARACTERS, RESERVED_KEY_PLACEHOLDERS

_WHITESPACE_RE = re.compile(r"[\r\n\t ]+")
_NAMED_ENTITY_RE = re.compile(r"&([a-z])[a-z]+;", re.IGNORECASE)
# Only semicolon-terminated references are decoded; "&copy" without ";" stays literal
_ENTITY_REF_RE = re.compile(r"&(?:#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")
_RESERVED_TABLE = dict(zip(RESERVED_KEY_CHARACTERS, RESERVED_KEY_PLACEHOLDERS))


def _decode_entities(text: str) -> str:
    return _ENTITY_REF_RE.sub(lambda match: unescape(match.group(0)), text)


def _encode_entities(text: str) -> str:
    """Encode every character that has a named HTML entity (quotes included)."""
    encoded = []
    for char in text:
        if char == "'":
            encoded.append("&#039;")
        elif ord(char) in codepoint2name:
            encoded.append(f"&{codepoint2name[ord(char)]};")
        else:
            encoded.append(char)
    return "".join(encoded)


def clean_store_key(raw: str) -> str:
    """
    Sanitize a key into a filesystem-safe name.

    Steps:
    1. Collapse whitespace runs to a single space
    2. Replace each reserved character with its own placeholder
    3. Normalize HTML entities (decode ``;``-terminated references, then re-encode)
    4. Collapse named entities to their base letter (``&eacute;`` -> ``e``)
    5. Spaces become hyphens
    6. Percent-encode the rest and turn ``%`` into ``-``

    Args:
        raw: Prefixed key

    Returns:
        Key made only of ``A-Z a-z 0-9 - _ . ~``
    """
    text = _WHITESPACE_RE.sub(" ", raw)
    text = "".join(_RESERVED_TABLE.get(char, char) for char in text)
    text = _encode_entities(_decode_entities(text))
    text = _NAMED_ENTITY_RE.sub(r"\1", text)
    text = text.replace(" ", "-")
    return quote(text, safe="").replace("%", "-")


def compute_storage_key(prefix: str, logical_key: str, requires_safe_keys: bool = False) -> str:
    """
    Derive the storage key for a logical key.

    Deterministic: the same (prefix, logical_key, requires_safe_keys) always
    yields the same storage key.

    Args:
        prefix: Namespace prefix
        logical_key: Caller's key
        requires_safe_keys: Whether the bound adapter needs filesystem-safe names

    Returns:
        Storage key
    """
    key = prefix + logical_key
    if requires_safe_keys:
        return clean_store_key(key)
    return key
