"""Core package for termsnap.

Layers, leaves first: ``calendar`` (resolver, recess), ``store`` (keyed
persistence), ``lifecycle`` (snapshot manager) and ``facade`` (entry point).
Settings and logging live in ``termsnap.core.settings``.
"""

from __future__ import annotations

__all__ = ["__doc__"]
