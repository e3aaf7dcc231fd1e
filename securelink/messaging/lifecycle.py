"""
Lazy Component Lifecycle

Process-wide instances created on first access:
- One initialization task per component class
- Concurrent first callers all await that same task
- A failed initialization is cleared so a later call can retry

The task is recorded before the first suspension point, so a caller
arriving while initialization is pending never starts a second one and
never receives an instance whose initialization has not finished.
"""

import asyncio
import logging
from typing import Optional, Type, TypeVar

from ..exceptions import NotInitializedError
from ..provider import CryptoProvider, acquire_provider


_LOGGER = logging.getLogger(__name__)

T = TypeVar('T', bound='LazySingleton')


class LazySingleton:
    """
    Base class for components with a lazily initialized shared instance.

    Subclasses override _setup() for work done after the provider is
    acquired. Each subclass gets its own instance slot.
    """

    _init_task: Optional['asyncio.Future'] = None

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._init_task = None

    def __init__(self, provider: Optional[CryptoProvider] = None):
        """
        Create an uninitialized component.

        Args:
            provider: Crypto provider to use; acquired on init() if None
        """
        self._provider = provider

    @classmethod
    async def get_instance(cls: Type[T]) -> T:
        """
        Get the shared instance, initializing it on first use.

        Returns:
            The fully initialized instance (same object for every caller)
        """
        task = cls._init_task
        if task is None or (
            not task.done() and task.get_loop() is not asyncio.get_running_loop()
        ):
            task = asyncio.ensure_future(cls._initialize_shared())
            cls._init_task = task
        # Shielded so one caller's cancellation doesn't abort the others
        return await asyncio.shield(task)

    @classmethod
    async def _initialize_shared(cls: Type[T]) -> T:
        try:
            instance = await cls.create()
        except BaseException:
            if cls._init_task is asyncio.current_task():
                cls._init_task = None
            raise
        _LOGGER.debug("%s instance initialized", cls.__name__)
        return instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the shared instance; the next get_instance() creates a new one."""
        cls._init_task = None

    @classmethod
    async def create(cls: Type[T], provider: Optional[CryptoProvider] = None) -> T:
        """
        Create and initialize a standalone (non-shared) instance.

        Args:
            provider: Crypto provider to use; acquired if None
        """
        instance = cls(provider)
        await instance.init()
        return instance

    async def init(self) -> None:
        """Acquire the crypto provider and run component setup."""
        if self._provider is None:
            self._provider = await acquire_provider()
        await self._setup()

    async def _setup(self) -> None:
        """Component-specific initialization."""

    def _require_provider(self) -> CryptoProvider:
        """Return the crypto provider, raising NotInitializedError if absent."""
        if self._provider is None:
            raise NotInitializedError("Crypto not initialized. Call get_instance() first.")
        return self._provider
