"""
One-shot sensor permission gate.

Some platforms require an explicit user grant before delivering motion or
orientation events; others deliver unconditionally (AlwaysGranted).
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Awaitable, Callable
import logging

from tracking.errors import PermissionDenied

logger = logging.getLogger(__name__)


class PermissionState(Enum):
    GRANTED = "granted"
    DENIED = "denied"


class PermissionGate(ABC):
    @abstractmethod
    async def request(self) -> PermissionState:
        pass

    async def require(self) -> None:
        """Request permission, raising PermissionDenied unless granted."""
        try:
            state = await self.request()
        except PermissionDenied:
            raise
        except Exception as e:
            raise PermissionDenied(f"Permission request failed: {e}") from e
        if state is not PermissionState.GRANTED:
            raise PermissionDenied(f"Permission resolved to {state.value}")


class AlwaysGranted(PermissionGate):
    """Platforms without a permission prompt."""

    async def request(self) -> PermissionState:
        return PermissionState.GRANTED


class CallbackPermissionGate(PermissionGate):
    """
    Wraps an async prompt returning the platform's response string.
    Only the exact response "granted" counts as a grant.
    """

    def __init__(self, prompt: Callable[[], Awaitable[str]], name: str = "sensor"):
        self.prompt = prompt
        self.name = name

    async def request(self) -> PermissionState:
        response = await self.prompt()
        logger.info("%s permission response: %s", self.name, response)
        if response == PermissionState.GRANTED.value:
            return PermissionState.GRANTED
        return PermissionState.DENIED
