"""
UI state shared by feed components.

Passed explicitly to whoever needs it; there is no module-level store.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, FrozenSet, Optional

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], float]


class Dialog(str, Enum):
    IMAGE_PREVIEW = "imagePreview"


class DeletedIds:
    """
    Keys hidden from the feed because a delete was requested.

    `hidden` reacts immediately (rows start their exit transition); `settled`
    only includes keys hidden for at least ``exit_delay`` seconds, and is what
    the feed filters its data with.
    """

    def __init__(self, *, exit_delay: float = 0.6, clock: Clock = time.monotonic):
        self.exit_delay = exit_delay
        self._clock = clock
        self._hidden_at: Dict[str, float] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._hidden_at

    def __len__(self) -> int:
        return len(self._hidden_at)

    def hide(self, key: str) -> None:
        self._hidden_at.setdefault(key, self._clock())

    def restore(self, key: str) -> bool:
        return self._hidden_at.pop(key, None) is not None

    @property
    def hidden(self) -> FrozenSet[str]:
        return frozenset(self._hidden_at)

    def settled(self, now: Optional[float] = None) -> FrozenSet[str]:
        now = self._clock() if now is None else now
        return frozenset(
            k for k, at in self._hidden_at.items() if now - at >= self.exit_delay
        )


@dataclass
class AppState:
    deleted: DeletedIds = field(default_factory=DeletedIds)
    dialogs: Dict[Dialog, bool] = field(
        default_factory=lambda: {d: False for d in Dialog}
    )
    preview_image_src: str = ""
    editing_key: Optional[str] = None

    # ----- Dialogs -----

    def show_dialog(self, dialog: Dialog) -> None:
        self.dialogs[dialog] = True

    def close_dialog(self, dialog: Dialog) -> None:
        self.dialogs[dialog] = False

    def is_open(self, dialog: Dialog) -> bool:
        return self.dialogs.get(dialog, False)

    def preview_image(self, src: str) -> None:
        self.preview_image_src = src
        self.show_dialog(Dialog.IMAGE_PREVIEW)

    def close_preview(self) -> None:
        self.close_dialog(Dialog.IMAGE_PREVIEW)
        self.preview_image_src = ""

    # ----- Inline editing -----

    def start_edit(self, key: str) -> Optional[str]:
        """Enter edit mode for ``key``; returns the key that was being edited."""
        previous, self.editing_key = self.editing_key, key
        if previous and previous != key:
            LOGGER.debug("Leaving edit mode for %s", previous)
        return previous

    def stop_edit(self, key: Optional[str] = None) -> None:
        if key is None or self.editing_key == key:
            self.editing_key = None

    def is_editing(self, key: str) -> bool:
        return self.editing_key == key
