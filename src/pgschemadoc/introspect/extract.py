"""Top-level extraction entry point: connect, assemble, close."""
from __future__ import annotations
import logging

from pgschemadoc.config import ExtractConfig
from pgschemadoc.introspect.assembler import assemble_schema
from pgschemadoc.introspect.connection import open_connection
from pgschemadoc.introspect.models import Schema

logger = logging.getLogger(__name__)


async def extract_schema(config: ExtractConfig) -> Schema:
    """Extract the schema described by config.

    Args:
        config: Connection string, namespace, exclusions and timeout

    Returns:
        Assembled Schema
    """
    logger.info(f"Connecting to {config.redacted_url()}")
    async with open_connection(config.database_url, timeout=config.query_timeout) as conn:
        return await assemble_schema(
            conn,
            config.namespace,
            config.exclude,
            timeout=config.query_timeout
        )
