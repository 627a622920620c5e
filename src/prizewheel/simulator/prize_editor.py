"""
Prize list editor behind the simulator's admin panel.

Holds the text being typed and the last rejection message. All edits go
through the controller, so they are validated, persisted and redrawn the
same way as edits made from the command line.
"""

import logging

from prizewheel.core.errors import WheelError
from prizewheel.wheel.controller import SpinController

logger = logging.getLogger(__name__)

MAX_INPUT_LENGTH = 24


class PrizeEditor:
    """Admin panel state: open flag, input buffer and status line."""

    def __init__(self, controller: SpinController, max_length: int = MAX_INPUT_LENGTH) -> None:
        self.controller = controller
        self.max_length = max_length
        self.is_open = False
        self.text = ""
        self.message = ""

    @property
    def prizes(self) -> tuple[str, ...]:
        return self.controller.prizes

    def toggle(self) -> bool:
        """Open or close the panel. Returns the new open state."""
        self.is_open = not self.is_open
        self.message = ""
        return self.is_open

    def close(self) -> None:
        self.is_open = False
        self.message = ""

    def type_text(self, text: str) -> None:
        """Append typed characters, dropping anything past `max_length`."""
        printable = "".join(ch for ch in text if ch.isprintable())
        self.text = (self.text + printable)[:self.max_length]

    def backspace(self) -> None:
        self.text = self.text[:-1]

    def submit(self) -> str | None:
        """Add the typed label as a prize.

        Returns:
            The stored label, or None if the wheel rejected it. The
            rejection is kept in `message` and the typed text is kept.
        """
        try:
            label = self.controller.add_prize(self.text)
        except WheelError as e:
            self._rejected("add", e)
            return None
        self.text = ""
        self.message = f"Added {label}"
        return label

    def remove(self, index: int) -> str | None:
        """Remove the prize at `index`. Returns its label, or None if rejected."""
        try:
            label = self.controller.remove_prize(index)
        except WheelError as e:
            self._rejected("remove", e)
            return None
        self.message = f"Removed {label}"
        return label

    def _rejected(self, action: str, error: WheelError) -> None:
        self.message = str(error)
        logger.warning(f"Prize {action} rejected: {error}")
