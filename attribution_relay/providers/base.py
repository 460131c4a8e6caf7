"""Base provider interface for analytics delivery."""

from abc import ABC, abstractmethod
from typing import Any


class DeliveryProvider(ABC):
    """Abstract base class for analytics ingestion clients."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return provider identifier."""
        pass

    @abstractmethod
    async def identify(self, identifications: list[dict[str, Any]]) -> None:
        """Submit user-property updates. Raises DeliveryError on failure."""
        pass

    @abstractmethod
    async def send_events(self, events: list[dict[str, Any]]) -> None:
        """Submit events. Raises DeliveryError on failure."""
        pass
