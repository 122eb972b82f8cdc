"""ResponseCache: request signature -> transport future.

Entries are never evicted. Sharing one instance between orchestrators
de-duplicates transport calls across them; dropping the instance is the only
way to forget entries.
"""

from __future__ import annotations

import json
import threading
from typing import Any, Generic, Hashable, TypeVar

V = TypeVar("V")


def make_signature(url: str, method: str = "GET", body: Any = None) -> str:
    """Deterministic cache key for a request.

    Mapping and sequence bodies are serialized with sorted keys so logically
    equal bodies produce the same signature.
    """
    if body is None:
        encoded = ""
    elif isinstance(body, bytes):
        encoded = body.decode("utf-8", errors="replace")
    elif isinstance(body, str):
        encoded = body
    else:
        encoded = json.dumps(body, sort_keys=True, separators=(",", ":"), default=str)
    return f"{(method or 'GET').upper()} {url} {encoded}"


class ResponseCache(Generic[V]):
    """Append-only mapping with first-writer-wins inserts."""

    def __init__(self) -> None:
        self._entries: dict[Hashable, V] = {}
        self._lock = threading.Lock()

    def get(self, signature: Hashable) -> V | None:
        return self._entries.get(signature)

    def put(self, signature: Hashable, value: V) -> V:
        """Insert value unless the signature is already present.

        Returns whichever value ends up stored, so a caller that lost the
        race adopts the winner's handle.
        """
        with self._lock:
            return self._entries.setdefault(signature, value)

    def __contains__(self, signature: object) -> bool:
        return signature in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ResponseCache({len(self._entries)} entries)"
