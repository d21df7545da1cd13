"""Process-wide switch and helper for progress reporting."""

import logging
import os

_enabled: bool = True


def enable_progress() -> None:
    """Enable progress logging for all wordtok operations."""
    global _enabled
    _enabled = True


def disable_progress() -> None:
    """Disable progress logging for all wordtok operations."""
    global _enabled
    _enabled = False


def _is_enabled() -> bool:
    """Check if progress is enabled (respects env var override)."""
    if os.environ.get("WORDTOK_DISABLE_PROGRESS", "").strip() == "1":
        return False
    return _enabled


class MergeProgress:
    """Log training progress roughly ``steps`` times over ``total`` merges."""

    def __init__(
        self,
        log: logging.Logger,
        total: int,
        show: bool = True,
        steps: int = 10,
    ) -> None:
        self.log = log
        self.total = total
        self.every = max(1, total // steps)
        self.active = show and _is_enabled()

    def update(self, done: int, vocab_len: int, vocab_size: int) -> None:
        if self.active and done % self.every == 0:
            self.log.info(
                "progress: %d merges, vocab %d/%d", done, vocab_len, vocab_size
            )
