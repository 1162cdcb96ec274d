from __future__ import annotations

from abc import ABC, abstractmethod


class Adapter(ABC):
    """A named strategy that turns a page URL into Markdown."""

    name: str = "adapter"

    @abstractmethod
    def matches(self, url: str) -> bool:
        """Whether the chain should attempt this adapter for ``url``."""

    @abstractmethod
    async def fetch(self, url: str) -> str:
        """Return Markdown for ``url``; raise on any failure."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
