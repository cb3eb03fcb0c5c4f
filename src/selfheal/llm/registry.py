"""
Lazily-initialized holder for the shared model client.

One registry builds at most one ``ModelClient``. The first caller pays
for configuration loading and construction; everyone after that gets the
cached instance without touching the lock.
"""

from __future__ import annotations

import threading
from collections.abc import Callable

import structlog

from selfheal.llm.client import ModelClient
from selfheal.llm.config import ModelConfig

logger = structlog.get_logger(__name__)

ClientFactory = Callable[[ModelConfig], ModelClient]


class SharedClientRegistry:
    """
    Process-wide home for one ``ModelClient``.

    Uses double-checked locking: an unsynchronized read first, then the
    lock and a second read before constructing. Construction never awaits,
    so the registry is safe to share between threads and coroutines.
    """

    def __init__(self, client_factory: ClientFactory = ModelClient) -> None:
        self._client_factory = client_factory
        self._client: ModelClient | None = None
        self._lock = threading.Lock()
        self._construction_count = 0
        self._log = logger.bind(component="client_registry")

    @property
    def construction_count(self) -> int:
        """Number of clients this registry has built (0 or 1)."""
        return self._construction_count

    def peek(self) -> ModelClient | None:
        """Return the cached client without creating one."""
        return self._client

    def get_or_create(self, config_loader: Callable[[], ModelConfig]) -> ModelClient:
        """
        Return the shared client, constructing it on first use.

        Args:
            config_loader: Zero-argument callable producing the ModelConfig.
                Only called by the thread that performs construction.

        Returns:
            The one ModelClient owned by this registry
        """
        client = self._client
        if client is not None:
            return client

        with self._lock:
            if self._client is None:
                config = config_loader()
                self._client = self._client_factory(config)
                self._construction_count += 1
                self._log.info(
                    "Model client initialized",
                    provider=str(config.provider),
                    model=config.model,
                )
            return self._client
