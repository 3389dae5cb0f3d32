"""Cumulative size budget shared by one walker invocation."""

from dataclasses import dataclass


@dataclass
class SizeBudget:
    """Bytes consumed so far against a configured maximum.

    A maximum of 0 or less means unlimited. The budget counts as exceeded
    only once the consumed total is strictly greater than the maximum, so
    the file that crosses the limit is still admitted.
    """

    max_bytes: int
    consumed: int = 0

    @property
    def unlimited(self) -> bool:
        return self.max_bytes <= 0

    @property
    def exceeded(self) -> bool:
        return not self.unlimited and self.consumed > self.max_bytes

    def consume(self, size: int) -> None:
        """Charge ``size`` bytes against the budget."""
        self.consumed += size
