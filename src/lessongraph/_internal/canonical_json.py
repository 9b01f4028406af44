"""Byte-stable JSON serialization for reports and sequences.

Every JSON artifact lessongraph writes goes through canonical_dumps(), so two
runs over an unchanged corpus produce identical bytes that CI can diff.
"""

import json
from typing import Any


def canonical_dumps(obj: Any, indent: int | None = None) -> str:
    """
    Serialize obj with sorted keys and fixed separators.

    Lists are emitted in the order given; callers sort them beforehand.
    With indent set, output is pretty-printed but still deterministic.
    """
    if indent is None:
        return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return json.dumps(obj, sort_keys=True, indent=indent, ensure_ascii=False)
