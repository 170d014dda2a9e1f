# File: admin_core/services/base_service.py

import copy
import logging
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from admin_core.core.exceptions import EntityNotFoundException
from admin_core.core.messages import MessageCatalog
from admin_core.repositories.base_repository import BaseRepository
from admin_core.schemas.common import BulkOperationResult, PrincipalContext

T = TypeVar("T")
logger = logging.getLogger(__name__)


class BaseService(Generic[T]):
    """
    Base service for the admin features.

    Provides common functionality including:
    - Entity lookup by public id
    - Audit logging of mutating operations
    - Bulk result messages from the message catalog
    """

    entity_type: str = "Entity"

    def __init__(
        self,
        repository: BaseRepository[T],
        messages: Optional[MessageCatalog] = None,
        principal: Optional[PrincipalContext] = None,
    ):
        """
        Initialize service with dependencies.

        Args:
            repository: Repository of the entity this service manages
            messages: Message catalog for human-readable results
            principal: Acting principal, used for audit logging only
        """
        self.repository = repository
        self.messages = messages
        self.principal = principal or PrincipalContext()

    def with_principal(self, principal: PrincipalContext):
        """Return a shallow copy of this service acting for another principal."""
        clone = copy.copy(self)
        clone.principal = principal
        return clone

    async def get_or_404(self, public_id: str) -> T:
        """
        Get an entity by public id or raise EntityNotFoundException.

        Args:
            public_id: Public identifier of the entity

        Returns:
            Entity if found

        Raises:
            EntityNotFoundException: If entity is not found
        """
        entity = await self.repository.get_by_public_id(public_id)
        if entity is None:
            raise EntityNotFoundException(self.entity_type, public_id)
        return entity

    def _message(self, key: str, **params: Any) -> Optional[str]:
        if self.messages is None:
            return None
        return self.messages.get(key, **params)

    def _bulk_result(
        self, key: str, count: int, affected_rows: int, skipped: List[str]
    ) -> BulkOperationResult:
        return BulkOperationResult(
            count=count,
            affected_rows=affected_rows,
            skipped=skipped,
            message=self._message(key, count=count, skipped=len(skipped)),
        )

    def _log_operation(
        self,
        operation: str,
        entity_type: str,
        entity_id: Any = None,
        details: Dict[str, Any] = None,
    ) -> None:
        """
        Log an operation for auditing purposes.

        Args:
            operation: Operation name (create, update, delete, etc.)
            entity_type: Type of entity being operated on
            entity_id: Optional entity ID
            details: Optional operation details
        """
        log_data = {
            "operation": operation,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "principal_id": self.principal.principal_id,
            "timestamp": datetime.now().isoformat(),
            "details": details,
        }

        logger.info(
            f"{operation.upper()} {entity_type} {entity_id} by {self.principal.principal_id or 'system'}",
            extra=log_data,
        )
