"""Flatten chat turns into the single prompt the upstream accepts."""
from typing import Any, Iterable, Optional

VALID_ROLES = ("user", "assistant", "system")


def resolve_content(content: Any) -> Optional[str]:
    """Resolve string or multi-part content into plain text.

    Parts contribute their ``text`` field; images and other structured parts
    are dropped. Returns None for unsupported shapes.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, dict):
                text = part.get("text")
                if isinstance(text, str) and text:
                    parts.append(text)
        return "".join(parts)
    return None


def render_turn(message: Any) -> Optional[str]:
    """Render one turn as ``role: text``, or None if it should be skipped."""
    if not isinstance(message, dict):
        return None
    role = message.get("role")
    if role not in VALID_ROLES or not message.get("content"):
        return None
    text = resolve_content(message["content"])
    if not text or not text.strip():
        return None
    # upstream has no system role
    if role == "system":
        role = "user"
    return f"{role}: {text}"


def normalize_messages(messages: Iterable[Any]) -> str:
    """Join every surviving turn, in order, one per line."""
    rendered = (render_turn(message) for message in messages or [])
    return "\n".join(line for line in rendered if line is not None)
