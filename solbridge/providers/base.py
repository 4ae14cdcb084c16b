from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: float = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


@dataclass(frozen=True)
class DestinationObservation:
    """What the destination-side indexer knows about a relayed transfer.

    ``state`` is one of ``executing``, ``completed`` or ``failed``.
    """

    state: str
    transaction_hash: Optional[str] = None
    error: Optional[str] = None


class DestinationStatusProvider(Provider):
    """Looks up relay execution on the destination ledger for a finalized source transfer"""

    @abstractmethod
    async def lookup(
        self,
        source_signature: str,
        *,
        timeout_s: Optional[float] = None,
    ) -> Optional[DestinationObservation]:
        """Return the observation for ``source_signature``, or None if nothing is known yet"""
        pass
