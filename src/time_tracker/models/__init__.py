"""Data models for the time tracker."""

from .session import Session
from .settings import SETTING_LABELS, Settings

__all__ = ["Session", "Settings", "SETTING_LABELS"]
