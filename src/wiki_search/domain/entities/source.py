"""
Domain Entity: SourceDescriptor

Static description of one search backend (display name, badge color,
endpoint) plus whether it currently participates in searches.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass


@dataclass(frozen=True)
class SourceDescriptor:
    key: str
    display_name: str
    color: str
    api_url: str
    enabled: bool = True

    @property
    def site_url(self) -> str:
        """Site root derived from the ``/w/api.php`` endpoint."""
        return self.api_url.removesuffix("/w/api.php")

    def with_enabled(self, enabled: bool) -> SourceDescriptor:
        return dataclasses.replace(self, enabled=enabled)

    def to_dict(self) -> dict[str, object]:
        return dataclasses.asdict(self)
