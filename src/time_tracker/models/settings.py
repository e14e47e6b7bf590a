"""Cosmetic settings toggled from the settings screen."""

from typing import List, Tuple

from pydantic import BaseModel


class Settings(BaseModel):
    """Named boolean flags shown on the settings screen."""

    show_seconds: bool = True
    auto_save: bool = True
    notifications: bool = False
    dark_mode: bool = True

    def toggle(self, field: str) -> "Settings":
        """Return a copy with ``field`` flipped."""
        if field not in type(self).model_fields:
            raise ValueError(f"Unknown setting: {field}")
        return self.model_copy(update={field: not getattr(self, field)})

    model_config = {"frozen": True}


# Display order on the settings screen.
SETTING_LABELS: List[Tuple[str, str]] = [
    ("Show seconds", "show_seconds"),
    ("Auto-save", "auto_save"),
    ("Notifications", "notifications"),
    ("Dark mode", "dark_mode"),
]
