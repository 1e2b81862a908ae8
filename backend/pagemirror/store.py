"""
Flat-file store for mirrored pages.

Every record lives in <content_dir>/<code>.json. There is no index, no
eviction and no locking: writing an existing code replaces it.
"""

import json
import os
import re
import secrets
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

CODE_RE = re.compile(r"^[a-f0-9]{12}$")


def generate_code() -> str:
    """12 lowercase hex chars from 6 random bytes. No collision check."""
    return secrets.token_hex(6)


def is_valid_code(code: str) -> bool:
    return bool(code) and CODE_RE.match(code) is not None


def utc_timestamp() -> str:
    """ISO-8601 UTC with milliseconds, e.g. 2026-01-01T12:00:00.000Z"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PageRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    code: str
    original_url: str
    final_url: str
    frame_url: str | None = None
    content: str
    timestamp: str

    def to_json(self) -> str:
        return json.dumps(self.model_dump(by_alias=True), indent=2, ensure_ascii=False)


class ContentStore:
    def __init__(self, root: str):
        self.root = root

    def ensure_root(self):
        os.makedirs(self.root, exist_ok=True)

    def _path(self, code: str) -> str:
        return os.path.join(self.root, f"{code}.json")

    def save(self, code: str, record: PageRecord):
        """Write `record` under `code`. OSError propagates (permissions, disk full)."""
        if not is_valid_code(code):
            raise ValueError(f"Invalid page code: {code!r}")
        with open(self._path(code), "w", encoding="utf-8") as f:
            f.write(record.to_json())

    def load(self, code: str) -> PageRecord | None:
        """Return the record for `code`, or None if it is missing or unreadable."""
        if not is_valid_code(code):
            return None
        try:
            with open(self._path(code), "r", encoding="utf-8") as f:
                raw = f.read()
            return PageRecord.model_validate_json(raw)
        except (OSError, ValueError):  # ValidationError is a ValueError
            return None
