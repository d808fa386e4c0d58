"""
Keep destination tables in step with the data observed upstream
"""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import SchemaSyncError
from ingestion.loaders.base import StorageAdapter

logger = logging.getLogger(__name__)


class SchemaSynchronizer:
    """
    Create or extend a table from a representative flattened row.

    Evolution is additive only: missing columns are added with their
    inferred type, existing columns are never altered, retyped or dropped.
    """

    def __init__(self, storage: StorageAdapter):
        self.storage = storage

    async def ensure_table(self, table_name: str, sample_row: Optional[Dict[str, Any]]) -> List[str]:
        """
        Guarantee ``table_name`` exists with at least the columns of ``sample_row``.

        Args:
            table_name: Destination table
            sample_row: Representative flattened row; empty or None is a no-op

        Returns:
            Names of the columns created or added by this call

        Raises:
            SchemaSyncError: The destination refused the DDL
        """
        if not sample_row:
            return []

        operation = "INSPECT"
        try:
            if not await self.storage.table_exists(table_name):
                operation = "CREATE"
                return await self.storage.create_table(table_name, sample_row)

            operation = "ALTER"
            added = await self.storage.add_missing_columns(table_name, sample_row)
            if added:
                logger.info(f"Schema of {table_name} extended with {len(added)} columns: {', '.join(added)}")
            return added

        except SQLAlchemyError as e:
            logger.error(f"Schema synchronization failed for {table_name}: {e}")
            raise SchemaSyncError(
                f"Could not synchronize schema of {table_name}",
                context={"table_name": table_name, "operation": operation},
                original_exception=e
            )
