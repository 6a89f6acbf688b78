"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from rental.infrastructure.config import get_settings
from rental.infrastructure.persistence.json_catalog_repositories import (
    JsonEquipmentRepository,
    JsonKindRepository,
    JsonUserRepository,
)
from rental.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from rental.infrastructure.persistence.json_status_repositories import (
    JsonEquipmentStatusRepository,
    JsonOrderStatusRepository,
)
from rental.infrastructure.persistence.json_store import JsonStore


@lru_cache
def store() -> JsonStore:
    return JsonStore(get_settings().data_dir)


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository()


def order_status_repository() -> JsonOrderStatusRepository:
    return JsonOrderStatusRepository()


def equipment_status_repository() -> JsonEquipmentStatusRepository:
    return JsonEquipmentStatusRepository()


def equipment_repository() -> JsonEquipmentRepository:
    return JsonEquipmentRepository()


def kind_repository() -> JsonKindRepository:
    return JsonKindRepository()


def user_repository() -> JsonUserRepository:
    return JsonUserRepository()
