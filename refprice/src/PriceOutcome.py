"""PriceOutcome: the result of one fetch attempt against one source."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PriceOutcome:
    """Price or failure reported by a single source.

    Exactly one of ``price`` and ``error`` is set.

    :ivar source: Source name.
    :ivar price: Positive price if the fetch succeeded.
    :ivar error: Exception raised by the fetch if it failed.
    """

    source: str
    price: float | None = None
    error: BaseException | None = None

    def __post_init__(self) -> None:
        if (self.price is None) == (self.error is None):
            raise ValueError(
                f"PriceOutcome for {self.source} needs exactly one of price or error"
            )
        if self.price is not None and not self.price > 0:
            raise ValueError(f"PriceOutcome for {self.source} has non-positive price")

    @classmethod
    def ok(cls, source: str, price: float) -> PriceOutcome:
        return cls(source=source, price=price)

    @classmethod
    def failed(cls, source: str, error: BaseException) -> PriceOutcome:
        return cls(source=source, error=error)

    @property
    def success(self) -> bool:
        """Check if the fetch produced a price."""
        return self.price is not None

    def __str__(self) -> str:
        if self.success:
            return f"{self.source}: {self.price}"
        return f"{self.source}: {type(self.error).__name__}: {self.error}"
