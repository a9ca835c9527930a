"""
Memoization cache for calls to pure closures.
"""

import hashlib
from typing import Any, Dict, List, Optional, Sequence, Tuple

from rinha.rinha_ast import Term
from rinha.rinha_errors import UnhashableValue
from rinha.rinha_values import hash_value


class MemoCache:
    """Maps a cache key (body digest + argument digests) to a computed value.

    One cache lives for one program run. Entries are only ever added. Keys
    depend on the callee's body and the argument values alone, never on the
    rest of the calling environment.
    """
    def __init__(self):
        self.entries: Dict[str, Any] = {}
        # id(body) -> (body, digest); the body is kept so its id stays unique
        self._body_digests: Dict[int, Tuple[Term, str]] = {}
        self.hits = 0
        self.misses = 0
        self.bypasses = 0

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def body_digest(self, body: Term) -> str:
        """Digest of the body's full structure, locations included."""
        cached = self._body_digests.get(id(body))
        if cached is not None and cached[0] is body:
            return cached[1]
        digest = hashlib.sha256(repr(body).encode("utf-8")).hexdigest()
        self._body_digests[id(body)] = (body, digest)
        return digest

    def cache_key(self, body: Term, arguments: Sequence[Any]) -> Optional[str]:
        """Key for a call, or None when an argument cannot be hashed (a closure)."""
        argument_digests: List[str] = []
        for argument in arguments:
            try:
                argument_digests.append(hash_value(argument))
            except UnhashableValue:
                return None
        h = hashlib.sha256(self.body_digest(body).encode("ascii"))
        for digest in argument_digests:
            h.update(b":")
            h.update(digest.encode("ascii"))
        return h.hexdigest()

    def lookup(self, key: str) -> Tuple[bool, Any]:
        if key in self.entries:
            self.hits += 1
            return True, self.entries[key]
        self.misses += 1
        return False, None

    def store(self, key: str, value: Any):
        self.entries[key] = value

    def stats(self) -> Dict[str, int]:
        return {
            "entries": len(self.entries),
            "hits": self.hits,
            "misses": self.misses,
            "bypasses": self.bypasses,
        }
