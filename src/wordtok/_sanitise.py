"""
Render token byte sequences for the human-readable vocab dump.
"""

import unicodedata


def render_bytes(b: bytes) -> str:
    """
    Render ``b`` as printable text.

    Valid UTF-8 is shown as text. Bytes that do not form valid UTF-8, such as
    the lone high bytes the pretokenizer splits multi-byte characters into,
    are shown as ``\\xNN``. Control and format characters are shown as
    ``\\uNNNN`` so every token fits on one line.
    """
    text = b.decode("utf-8", errors="backslashreplace")
    # category codes vary (Cc, Cf, Cn...), only the first letter matters
    return "".join(
        c if unicodedata.category(c)[0] != "C" else f"\\u{ord(c):04x}" for c in text
    )
