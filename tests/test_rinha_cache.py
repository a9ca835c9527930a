from rinha.rinha_ast import BinaryOp, Binary, Int, Location, Var
from rinha.rinha_cache import MemoCache
from rinha.rinha_environment import Scope
from rinha.rinha_values import Closure

L = Location(0, 5, "cache")
BODY = Binary(Var("x", L), BinaryOp.Add, Int(1, L), L)


def test_same_body_and_arguments_share_a_key():
    cache = MemoCache()
    assert cache.cache_key(BODY, [1, "a"]) == cache.cache_key(BODY, [1, "a"])


def test_structurally_equal_bodies_collapse_onto_one_key():
    twin = Binary(Var("x", L), BinaryOp.Add, Int(1, L), L)
    assert twin is not BODY
    cache = MemoCache()
    assert cache.cache_key(twin, [3]) == cache.cache_key(BODY, [3])


def test_key_depends_on_arguments_and_body():
    cache = MemoCache()
    other = Binary(Var("x", L), BinaryOp.Sub, Int(1, L), L)
    assert cache.cache_key(BODY, [1]) != cache.cache_key(BODY, [2])
    assert cache.cache_key(BODY, [1, 2]) != cache.cache_key(BODY, [2, 1])
    assert cache.cache_key(BODY, [1]) != cache.cache_key(other, [1])


def test_closure_argument_yields_no_key():
    cache = MemoCache()
    closure = Closure((), Int(0, L), Scope())
    assert cache.cache_key(BODY, [1, closure]) is None
    assert cache.cache_key(BODY, [(1, closure)]) is None


def test_lookup_store_and_stats():
    cache = MemoCache()
    key = cache.cache_key(BODY, [1])
    assert cache.lookup(key) == (False, None)
    cache.store(key, 2)
    assert key in cache
    assert cache.lookup(key) == (True, 2)
    assert len(cache) == 1
    assert cache.stats() == {"entries": 1, "hits": 1, "misses": 1, "bypasses": 0}


def test_body_digest_is_computed_once_per_body():
    cache = MemoCache()
    first = cache.body_digest(BODY)
    assert cache.body_digest(BODY) == first
    assert len(cache._body_digests) == 1
