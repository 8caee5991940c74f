"""Report sources: link resolution, download, parsing and normalization."""

from covidmex.sources.adapters import (
    ADAPTERS,
    ECDCAdapter,
    GuzmartAdapter,
    JHUAdapter,
    SerendipiaAdapter,
    SourceAdapter,
    SSAAdapter,
    adapter_for,
)

__all__ = [
    "ADAPTERS",
    "ECDCAdapter",
    "GuzmartAdapter",
    "JHUAdapter",
    "SerendipiaAdapter",
    "SourceAdapter",
    "SSAAdapter",
    "adapter_for",
]
