"""
Process-wide lookup of context windows by namespace.
"""
import threading
from typing import Dict, List

from .config import ContextWindowOptions
from .retrieve import ContextWindow, connect_context_window, create_context_window


class WindowRegistry:
    """
    Maps namespaces to context windows.

    Map access is serialized by a lock; ingestion in create() runs outside it,
    so a slow ingest never blocks lookups of other namespaces. State lives for
    the lifetime of the process only.
    """

    def __init__(self, embedding_client=None, chat_client=None, store=None):
        self._windows: Dict[str, ContextWindow] = {}
        self._lock = threading.Lock()
        self._clients = {
            "embedding_client": embedding_client,
            "chat_client": chat_client,
            "store": store,
        }

    async def create(self, opts: ContextWindowOptions) -> ContextWindow:
        """
        Ingest the options' data and register the window under its namespace,
        replacing any earlier window for that namespace.
        """
        window = await create_context_window(opts, **self._clients)
        with self._lock:
            self._windows[window.namespace] = window
        return window

    def get(self, namespace: str, **overrides) -> ContextWindow:
        """
        Return the registered window, or connect to the namespace without
        ingestion and register the result.

        Args:
            namespace: Namespace to look up
            **overrides: ai_model, top_k, max_context_chars, score_threshold
                used when a new connection has to be made
        """
        with self._lock:
            window = self._windows.get(namespace)
        if window is not None:
            return window

        # Racing callers may each connect; the first one registered wins
        window = connect_context_window(namespace, **overrides, **self._clients)
        with self._lock:
            return self._windows.setdefault(namespace, window)

    def has(self, namespace: str) -> bool:
        with self._lock:
            return namespace in self._windows

    def delete(self, namespace: str) -> bool:
        with self._lock:
            return self._windows.pop(namespace, None) is not None

    def clear(self):
        with self._lock:
            self._windows.clear()

    def list(self) -> List[str]:
        with self._lock:
            return list(self._windows)

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)


default_registry = WindowRegistry()


async def create_ctx_window(opts: ContextWindowOptions) -> ContextWindow:
    return await default_registry.create(opts)


def get_ctx_window(namespace: str, **overrides) -> ContextWindow:
    return default_registry.get(namespace, **overrides)


def has_ctx_window(namespace: str) -> bool:
    return default_registry.has(namespace)


def delete_ctx_window(namespace: str) -> bool:
    return default_registry.delete(namespace)


def clear_ctx_windows():
    default_registry.clear()


def list_ctx_windows() -> List[str]:
    return default_registry.list()
