"""
Shared builders for tag snapshots and StackExchange-shaped payloads.
"""
from __future__ import annotations

import gzip
import json
from typing import Dict, Iterable, Tuple

from app.core.time_utils import utc_now
from app.schemas.tag import Snapshot, TagRecord

TEST_BASE_URL = "https://api.test/2.3/tags"


def make_snapshot(tags: Iterable[Tuple[str, int]]) -> Snapshot:
    """Build a snapshot from (name, count) pairs."""
    return Snapshot(
        tags=tuple(TagRecord(name=name, count=count) for name, count in tags),
        imported_at=utc_now(),
        pages_fetched=1,
    )


def tags_payload(tags: Iterable[Tuple[str, int]], has_more: bool = True) -> Dict:
    """StackExchange-shaped response body."""
    return {
        "items": [
            {"name": name, "count": count, "has_synonyms": False, "is_moderator_only": False}
            for name, count in tags
        ],
        "has_more": has_more,
        "quota_max": 300,
        "quota_remaining": 299,
    }


def gzip_json(payload: Dict) -> bytes:
    return gzip.compress(json.dumps(payload).encode("utf-8"))


# Valid gzip header followed by a deflate stream that does not inflate
CORRUPT_GZIP = gzip.compress(b'{"items": []}')[:10] + b"\xff\xff\xff\xff garbage deflate"
