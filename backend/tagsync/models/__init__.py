from __future__ import annotations

from tagsync.models.tag import SharedTag, Tag  # noqa: F401
