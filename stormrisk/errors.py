from typing import Optional


class LoadFailure(RuntimeError):
    """Raised when any dashboard feed cannot be fetched, parsed or validated."""

    def __init__(self, feed: Optional[str], message: str):
        self.feed = feed
        prefix = f"{feed}: " if feed else ""
        super().__init__(f"{prefix}{message}")
