"""EventDesk Core -- 校园活动聚合存储

公共入口：EventAggregateStore + PersistenceGateway 实现。
"""

from .aggregate_store import EventAggregateStore
from .exceptions import (
    DuplicateIdError,
    EventDeskError,
    GatewayError,
    InvalidTransitionError,
    LoadError,
    NotFoundError,
    PersistError,
    ValidationError,
)
from .store import InMemoryGateway, PersistenceGateway, SqliteGateway, create_gateway

__all__ = [
    "EventAggregateStore",
    "PersistenceGateway",
    "SqliteGateway",
    "InMemoryGateway",
    "create_gateway",
    "EventDeskError",
    "NotFoundError",
    "DuplicateIdError",
    "ValidationError",
    "InvalidTransitionError",
    "GatewayError",
    "LoadError",
    "PersistError",
]
