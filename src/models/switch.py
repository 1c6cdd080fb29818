"""Switch zone model."""

from dataclasses import dataclass, field
from typing import Any

from models.base import ZoneKind


@dataclass
class Switch:
    """A heating-loop relay zone."""

    id: int
    name: str
    state: bool = False
    kind: ZoneKind = field(default=ZoneKind.SWITCH, init=False, repr=False)

    def to_state_dict(self) -> dict[str, Any]:
        """Return current state as dict."""
        return {
            "id": self.id,
            "name": self.name,
            "state": "on" if self.state else "off",
        }
