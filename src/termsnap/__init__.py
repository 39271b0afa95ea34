"""termsnap: temporal snapshot consistency engine for school administration data.

Decides, for any (entity, period) pair, whether frozen historical attributes or
live attributes apply, and keeps persisted snapshots complete and valid as
periods open and close.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.3.0"
