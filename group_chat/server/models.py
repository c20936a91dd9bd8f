"""In-memory models for connected chat users."""
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(eq=False)
class User:
    id: str
    name: str
    connection: Any = field(repr=False)
    typing: bool = False

    def public(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name}
