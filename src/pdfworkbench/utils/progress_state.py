"""
PDF Workbench - Progress State Module

Progress events emitted by page-by-page operations, plus a small tracker
used by front ends to avoid redundant progress updates.
"""

from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProgressEvent:
    """One page of a streaming operation has completed.

    Attributes:
        current: 1-based number of the page just finished
        total: Total number of pages in the sequence
    """

    current: int
    total: int

    @property
    def fraction(self) -> float:
        """Completed fraction in the range 0.0-1.0."""
        if self.total <= 0:
            return 1.0
        return self.current / self.total

    def __str__(self) -> str:
        return f"{self.current}/{self.total}"


ProgressCallback = Callable[[ProgressEvent], None]


@dataclass
class ProgressState:
    """Track the last displayed progress to avoid redundant updates.

    Attributes:
        fraction: Last displayed progress fraction (0.0-1.0)
        last_event: Last event accepted by the tracker
    """

    fraction: float = 0.0
    last_event: ProgressEvent | None = None

    # Threshold for progress update (1%)
    _threshold: float = field(default=0.01, repr=False)

    def should_update(self, event: ProgressEvent) -> bool:
        """Check if an event changed progress enough to warrant a display update.

        The final event of a sequence always qualifies.

        Args:
            event: Newly received progress event

        Returns:
            True if the change is significant (>= 1%) or the sequence finished
        """
        if event.current >= event.total:
            return True
        return abs(event.fraction - self.fraction) >= self._threshold

    def update(self, event: ProgressEvent) -> bool:
        """Record an event if it changed progress significantly.

        Args:
            event: Newly received progress event

        Returns:
            True if updated, False if unchanged
        """
        if not self.should_update(event):
            return False
        self.fraction = event.fraction
        self.last_event = event
        return True

    def reset(self) -> None:
        """Reset all state to initial values."""
        self.fraction = 0.0
        self.last_event = None

    def get_percentage(self) -> int:
        """Get current progress as integer percentage.

        Returns:
            Progress as integer 0-100
        """
        return int(self.fraction * 100)

    def is_complete(self) -> bool:
        """Check if progress indicates completion."""
        return self.fraction >= 1.0

    def __str__(self) -> str:
        return f"Progress: {self.get_percentage()}% | {self.last_event or '-'}"
