"""Transport interface consumed by the trading client."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class TransportResponse:
    """Status code and raw body of one HTTP exchange."""

    status_code: int
    body: bytes


class TransportBase(ABC):
    """Asynchronous HTTPS POST capability."""

    @abstractmethod
    async def post(
        self,
        url: str,
        headers: Sequence[tuple[str, str]],
        body: bytes,
        timeout: float,
    ) -> TransportResponse:
        pass

    @abstractmethod
    async def aclose(self) -> None:
        pass
