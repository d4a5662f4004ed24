"""Scheduling helpers for unattended organization runs."""

from .service import ScheduleService

__all__ = ["ScheduleService"]
