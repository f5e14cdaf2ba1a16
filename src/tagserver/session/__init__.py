"""Session loop module.

Exports the ``Session`` class, its state enum and result type.
"""
from __future__ import annotations

from tagserver.session.session import Session, SessionResult, SessionState

__all__ = ["Session", "SessionResult", "SessionState"]
