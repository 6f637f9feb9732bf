"""
Cache key serialization.

A structured ``CacheKey`` is encoded as compact JSON and hashed with SHA-256,
so store keys have a fixed length whatever the size of the variables.
"""

import hashlib
import json

from .cache_key import CacheKey


def encode_cache_key(key: CacheKey, canonical: bool = True) -> str:
    """Encode a key as JSON.

    With ``canonical`` set, mapping keys are sorted at every depth so that
    equal variables supplied in a different order encode identically.
    Without it, insertion order is kept.
    """
    return json.dumps(
        key.to_dict(),
        sort_keys=canonical,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def serialize_cache_key(key: CacheKey, canonical: bool = True) -> str:
    """Turn a cache key into its 64 character hex store key."""
    return hashlib.sha256(encode_cache_key(key, canonical).encode("utf-8")).hexdigest()
