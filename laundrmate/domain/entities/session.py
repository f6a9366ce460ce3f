from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    user = "user"
    owner = "owner"


@dataclass(frozen=True)
class Session:
    token: str
    role: Role = Role.user
    user_id: int | str | None = None  # decoded from the token when present

    @property
    def is_owner(self) -> bool:
        return self.role == Role.owner
