# File: admin_core/services/default_singleton.py

"""
"Exactly one default" enforcement for a mutable collection.

Setting a default is two writes: clear the flag on every member, then set it on
the target. Each enforcer holds an asyncio lock around both writes, so
concurrent ``set_default`` calls in this process are serialized and every
quiescent state has a single default. Writers in other processes are not
covered by the lock.
"""

import asyncio
import logging
from typing import Any, Dict, Generic, Optional, TypeVar

from admin_core.core.exceptions import ConfigurationException, EntityNotFoundException
from admin_core.repositories.base_repository import BaseRepository

T = TypeVar("T")
logger = logging.getLogger(__name__)


class DefaultScope(Generic[T]):
    """
    Where the default flag lives for one collection.

    Attributes:
        name: Entity name used in errors and logs
        repository: Repository of the collection
        field: Canonical name of the flag field
        on: Value marking the default member
        off: Value marking every other member
        active_filter: Extra filter a member must match to count as the default
        required: Whether a missing default is a configuration error
    """

    def __init__(
        self,
        name: str,
        repository: BaseRepository[T],
        field: str = "is_default",
        on: Any = True,
        off: Any = False,
        active_filter: Optional[Dict[str, Any]] = None,
        required: bool = False,
    ):
        self.name = name
        self.repository = repository
        self.field = field
        self.on = on
        self.off = off
        self.active_filter = active_filter or {}
        self.required = required

    async def unset_all_defaults(self) -> int:
        return await self.repository.update_many({self.field: self.on}, {self.field: self.off})

    async def mark_default(self, id: str) -> Optional[T]:
        return await self.repository.update_by_id(id, {self.field: self.on})

    async def find_default(self) -> Optional[T]:
        return await self.repository.get_detail({self.field: self.on, **self.active_filter})


class DefaultSingletonEnforcer(Generic[T]):
    """Serializes default changes within one scope."""

    def __init__(self, scope: DefaultScope[T]):
        self.scope = scope
        self._lock = asyncio.Lock()

    async def set_default(self, id: str) -> T:
        """
        Make the member with internal key ``id`` the only default.

        Args:
            id: Internal key of the new default

        Returns:
            The updated member

        Raises:
            EntityNotFoundException: If the member does not exist
        """
        async with self._lock:
            if not await self.scope.repository.exists({"id": id}):
                raise EntityNotFoundException(self.scope.name, id)

            cleared = await self.scope.unset_all_defaults()
            updated = await self.scope.mark_default(id)
            if updated is None:
                raise EntityNotFoundException(self.scope.name, id)

        logger.info(f"Default {self.scope.name} set to {id} (cleared {cleared})")
        return updated

    async def find_default(self) -> Optional[T]:
        return await self.scope.find_default()

    async def get_default(self) -> Optional[T]:
        """
        Return the default member.

        Raises:
            ConfigurationException: If the scope requires a default and none exists
        """
        default = await self.scope.find_default()
        if default is None and self.scope.required:
            raise ConfigurationException(
                f"No default {self.scope.name} is configured",
                details={"scope": self.scope.name},
            )
        return default
