"""
Coin listing cache

Maps user-typed coin names and symbols to CoinMarketCap ids. The listing
map is fetched once on first use and kept for the rest of the session.
"""

from typing import Dict, List, Optional, Iterable

from .client import CoinListing, CoinNotFoundError, MarketClient


class CoinListingRepository:
    """Case-insensitive lookup of coins by name, symbol or slug."""

    def __init__(self, client: MarketClient):
        self.client = client
        self._by_id: Dict[int, CoinListing] = {}
        self._by_key: Dict[str, CoinListing] = {}

    @property
    def initialized(self) -> bool:
        return bool(self._by_id)

    def __len__(self) -> int:
        return len(self._by_id)

    def load(self, listings: Iterable[CoinListing]) -> None:
        """Replace the cache with ``listings``."""
        self._by_id.clear()
        self._by_key.clear()

        # Lower rank wins when two coins share a symbol
        ordered = sorted(listings, key=lambda c: (c.rank is None, c.rank or 0))
        for listing in ordered:
            self._by_id[listing.id] = listing
            for key in (listing.name, listing.symbol, listing.slug):
                if key:
                    self._by_key.setdefault(key.lower(), listing)

    async def refresh(self) -> None:
        """Fetch the listing map from the API. Raises MarketDataError."""
        self.load(await self.client.fetch_listings())

    async def ensure_loaded(self) -> None:
        if not self.initialized:
            await self.refresh()

    def get(self, coin_id: int) -> Optional[CoinListing]:
        return self._by_id.get(coin_id)

    def resolve(self, name: str) -> CoinListing:
        try:
            return self._by_key[name.lower()]
        except KeyError:
            raise CoinNotFoundError(name) from None

    def resolve_all(self, names: Iterable[str]) -> List[CoinListing]:
        """Resolve every name, keeping order and dropping repeats."""
        resolved: List[CoinListing] = []
        for name in names:
            listing = self.resolve(name)
            if listing not in resolved:
                resolved.append(listing)
        return resolved
