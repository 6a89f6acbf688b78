"""User aggregate: the owner of orders and the actor behind status changes."""

from __future__ import annotations

from dataclasses import dataclass

from rental.domain.exceptions import ValidationError


@dataclass
class User:

    id: int | None
    name: str

    @staticmethod
    def create(name: str) -> User:
        if not name or not name.strip():
            raise ValidationError("User name is required")
        return User(id=None, name=name.strip())
