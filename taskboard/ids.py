"""
Identifier generation for columns and tasks.

Ids are opaque uuid4 strings; callers treat them as unique keys only.
"""
import uuid
from typing import Container


def new_id(taken: Container[str] = ()) -> str:
    """Return a fresh uuid4 string not present in `taken`."""
    while True:
        candidate = str(uuid.uuid4())
        if candidate not in taken:
            return candidate
