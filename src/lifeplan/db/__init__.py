"""SQLite storage for profiles, daily logs, modes, calibration state and plans."""

from __future__ import annotations

from lifeplan.db.connection import DatabaseConnection, get_db, set_db

__all__ = ["DatabaseConnection", "get_db", "set_db"]
