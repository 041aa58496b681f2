"""CLI package.

The ``cli`` sub-package contains the Click application that runs the
engine's operations against snapshot files.
"""
from __future__ import annotations
