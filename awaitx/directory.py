from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set
import time

# Member called on every peer to run (or answer) a sweep. Sweeps travel
# as publishes, hence the trailing "!".
SWEEP_MEMBER = "sync_directory"
SWEEP_CALLBACK = f"${SWEEP_MEMBER}!"

@dataclass
class Directory:
    """
    Best-effort cache of what peers last reported: node id -> names.
    Filled only by sweep replies, so it may be stale or incomplete.
    """
    entries: Dict[str, List[str]] = field(default_factory=dict)
    last_seen: Dict[str, float] = field(default_factory=dict)   # node id -> ts

    def learn(self, node_id: str, names: Iterable[str], ts: Optional[float] = None) -> None:
        # replace, never merge: a reply is the peer's full current list
        self.entries[node_id] = list(names)
        self.last_seen[node_id] = ts or time.time()

    def forget(self, node_id: str) -> None:
        self.entries.pop(node_id, None)
        self.last_seen.pop(node_id, None)

    def names_of(self, node_id: str) -> List[str]:
        return list(self.entries.get(node_id, []))

    def peers_supporting(self, name: str) -> Set[str]:
        return {nid for nid, names in self.entries.items() if name in names}

    def snapshot(self) -> Dict[str, List[str]]:
        return {nid: list(names) for nid, names in self.entries.items()}

    def prune(self, stale_after_s: float = 60.0) -> List[str]:
        cutoff = time.time() - max(0.0, stale_after_s)
        removed: List[str] = []
        for nid, ts in list(self.last_seen.items()):
            if ts < cutoff:
                removed.append(nid)
                self.forget(nid)
        return removed

    def __contains__(self, node_id: str) -> bool:
        return node_id in self.entries

    def __len__(self) -> int:
        return len(self.entries)

def sweep_request() -> dict:
    return {"callback": SWEEP_CALLBACK}

def sweep_reply(node_id: str, names: Iterable[str]) -> dict:
    return {"from": node_id, "names": sorted(names)}
