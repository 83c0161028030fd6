"""
Rendering interfaces used by the extraction stages.

A Renderer owns the browser for one request. It hands out independent
rendering contexts; each context loads one URL at a time and returns a
BeautifulSoup snapshot of the rendered DOM.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncContextManager, Callable

from bs4 import BeautifulSoup


@dataclass
class RenderedPage:
    """Snapshot of a page after rendering finished."""
    url: str                # Final URL (after redirects), used to resolve links
    soup: BeautifulSoup


class RenderingContext(ABC):
    """An isolated page that can load URLs."""

    @abstractmethod
    async def render(self, url: str) -> RenderedPage:
        """
        Navigate to url, wait for network idle and snapshot the DOM.

        Raises:
            NavigationFailure: If the page fails to load or times out
        """


class Renderer(ABC):
    """Request-scoped rendering engine."""

    async def start(self):
        """Acquire engine resources. Called on context manager entry."""

    async def close(self):
        """Release engine resources. Called on context manager exit."""

    @abstractmethod
    def open_context(self) -> AsyncContextManager[RenderingContext]:
        """
        Open an independent rendering context.

        The context is released when the async context manager exits,
        whatever the outcome.
        """

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


RendererFactory = Callable[[], Renderer]
