"""Pair: base/quote currency pair parsed from user input.

.. code-block:: python

    >>> pair = Pair.from_string("ETH/USD")
    >>> str(pair)
    'eth/usd'
    >>> pair.base
    'eth'
"""

from __future__ import annotations


class Pair:
    """A trading pair.

    :ivar base: Base currency symbol (lowercase).
    :ivar quote: Quote currency symbol (lowercase).
    """

    def __init__(self, base: str, quote: str) -> None:
        """Initialize a pair.

        :param base: Base currency symbol (e.g., "btc", "eth").
        :param quote: Quote currency symbol (e.g., "usd").
        :raises ValueError: If either symbol is empty.
        """
        if not base or not quote:
            raise ValueError("Base and quote must not be empty")
        self.base = base.lower()
        self.quote = quote.lower()

    def __str__(self) -> str:
        return f"{self.base}/{self.quote}"

    def __repr__(self) -> str:
        return f"Pair({self.base!r}, {self.quote!r})"

    def __hash__(self) -> int:
        return hash(str(self))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pair):
            return NotImplemented
        return str(self) == str(other)

    @classmethod
    def from_string(cls, pair_str: str) -> Pair:
        """Parse a pair string in format "base/quote".

        :param pair_str: Pair string like "eth/usd".
        :returns: New Pair instance.
        :raises ValueError: If pair string format is invalid.
        """
        parts = [p.strip() for p in pair_str.lower().split("/")]
        if len(parts) != 2 or not all(parts):
            raise ValueError(
                f"Invalid pair format '{pair_str}'. Expected 'base/quote' (e.g., 'eth/usd')"
            )
        return cls(parts[0], parts[1])
