"""FetchCoordinator: Concurrent price fetching across all configured sources.

Architecture:
    - One task per fetcher, all launched together
    - Each task is bounded by its own fetcher's timeout
    - Every failure is caught inside its task and reported as a PriceOutcome,
      so no task can cancel or outlive a sibling
    - asyncio.gather is the join barrier: fetch_all() returns only once
      every task has finished, with one result slot per fetcher
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from .fetchers import FetcherNetworkError
from .PriceOutcome import PriceOutcome

if TYPE_CHECKING:
    from .fetchers import BaseFetcher

logger = logging.getLogger(__name__)


class FetchCoordinator:
    """Fetches a price from every source concurrently.

    :ivar fetchers: Fetchers to query, one task each.

    .. code-block:: python

        >>> coordinator = FetchCoordinator([get_fetcher("coinbase"), get_fetcher("kraken")])
        >>> outcomes = await coordinator.fetch_all()
        >>> [o.source for o in outcomes]
        ['coinbase', 'kraken']
    """

    def __init__(self, fetchers: list[BaseFetcher]) -> None:
        """Initialize the coordinator.

        :param fetchers: Fetchers to query (at least one).
        :raises ValueError: If no fetchers are given.
        """
        if not fetchers:
            raise ValueError("At least one fetcher is required")
        self.fetchers = list(fetchers)

    async def fetch_all(self) -> list[PriceOutcome]:
        """Fetch prices from all sources.

        Waits for every source to answer, fail or time out.

        :returns: One PriceOutcome per fetcher, in fetcher order.
        """
        tasks = [self._fetch_single(fetcher) for fetcher in self.fetchers]
        outcomes = await asyncio.gather(*tasks)

        succeeded = sum(1 for o in outcomes if o.success)
        logger.info(f"Fetched {succeeded}/{len(outcomes)} prices")
        return list(outcomes)

    async def _fetch_single(self, fetcher: BaseFetcher) -> PriceOutcome:
        """Fetch one source with its timeout.

        :param fetcher: Fetcher instance to use.
        :returns: Price or failure for this source.
        """
        name = fetcher.identify()
        try:
            price = await asyncio.wait_for(
                fetcher.fetch_price(),
                timeout=fetcher.timeout,
            )
            outcome = PriceOutcome.ok(name, price)
        except asyncio.TimeoutError:
            logger.warning(f"[{name}] Timeout after {fetcher.timeout}s")
            return PriceOutcome.failed(
                name, FetcherNetworkError(f"Timed out after {fetcher.timeout}s")
            )
        except Exception as e:
            logger.warning(f"[{name}] Error: {e}")
            return PriceOutcome.failed(name, e)

        pair = f"{fetcher.descriptor.base}/{fetcher.descriptor.quote}".upper()
        logger.info(f"[{name}] {pair} = {price:.2f}")
        return outcome
