"""
Text normalization, hashing and identity helpers.

Dependencies: hashlib, uuid (stdlib)
System role: Identity checks for annotation text
"""

import hashlib
import re
import uuid

_WHITESPACE = re.compile(r"\s+")

RECORD_ID_PREFIX = "ann"


def clean_text(text: str) -> str:
    """Trim and collapse every whitespace run to a single space."""
    return _WHITESPACE.sub(" ", text).strip()


def hash_text(text: str) -> str:
    """Return the MD5 hex digest used as a record's ``text_hash``."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def verify_text_hash(original_text: str, text_hash: str) -> bool:
    """Recompute the hash of ``original_text`` and compare it to the stored one."""
    return hash_text(original_text) == text_hash


def truncate(text: str, max_length: int, suffix: str = "...") -> str:
    """Cut ``text`` to ``max_length`` characters including ``suffix``."""
    if len(text) <= max_length:
        return text
    return text[: max(max_length - len(suffix), 0)] + suffix


def generate_record_id(prefix: str = RECORD_ID_PREFIX) -> str:
    """Generate an opaque record id such as ``ann_3f2a...``."""
    return f"{prefix}_{uuid.uuid4().hex}"


def extract_context(
    container_text: str,
    selected_text: str,
    window: int,
    start_offset: int | None = None,
) -> tuple[str, str]:
    """
    Capture up to ``window`` characters on each side of a selection.

    Uses ``start_offset`` when it actually points at the selected text,
    otherwise the first occurrence. Returns empty fragments when the
    selection cannot be found in its container.

    Args:
        container_text: Text of the element containing the selection
        selected_text: The selected text
        window: Characters to keep on each side
        start_offset: Offset of the selection within the container, if known

    Returns:
        tuple[str, str]: (before, after), each stripped
    """
    if not container_text or not selected_text:
        return "", ""

    start = start_offset
    if start is None or container_text[start:start + len(selected_text)] != selected_text:
        start = container_text.find(selected_text)
    if start == -1:
        return "", ""

    end = start + len(selected_text)
    before = container_text[max(0, start - window):start].strip()
    after = container_text[end:end + window].strip()
    return before, after
