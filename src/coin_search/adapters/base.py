from abc import ABC, abstractmethod
from typing import Any


class MarketDataSource(ABC):
    """Something the refresh loop can ask for one decoded market-data payload."""

    @abstractmethod
    async def fetch(self) -> Any:
        ...

    async def aclose(self) -> None:
        return None
