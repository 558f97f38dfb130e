from __future__ import annotations
from collections.abc import MutableMapping
from typing import Any, Dict, Iterator, List, Mapping, Optional

class LocalRegistry(MutableMapping):
    """
    Names one node serves: each maps to a callable or a plain value.
    Entries may be added, replaced or removed at any time.
    """

    def __init__(self, entries: Optional[Mapping[str, Any]] = None):
        self._entries: Dict[str, Any] = dict(entries or {})

    def __getitem__(self, name: str) -> Any:
        return self._entries[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._entries[name] = value

    def __delitem__(self, name: str) -> None:
        del self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"LocalRegistry({sorted(self._entries)!r})"

    def is_callable(self, name: str) -> bool:
        return callable(self._entries.get(name))

    def names(self) -> List[str]:
        return list(self._entries)
