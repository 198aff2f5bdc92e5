"""
Structured operational logging for indexing and query resolution.
"""

import logging
from typing import Any, Dict


def _truncate(text: str, limit: int = 50) -> str:
    return text[:limit] + "..." if len(text) > limit else text


class StructuredLogger:
    """Structured logger for catalog indexing and search operations."""

    def __init__(self, name: str = "product_search"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status == "failed":
            self.logger.error(message)
        else:
            self.logger.info(message)

    def log_index_item(self, item_id: int, name: str, status: str = "success", details: Dict[str, Any] = None):
        """Log the outcome of indexing one catalog item."""
        log_details = {"item_id": item_id, "name": _truncate(name)}
        if details:
            log_details.update(details)

        self.log_operation("index.item", status, log_details)

    def log_rebuild(self, indexed: int, failed: int, duration_ms: float, collection: str):
        """Log a completed index rebuild."""
        status = "success" if failed == 0 else "partial"
        self.log_operation("index.rebuild", status, {
            "collection": collection,
            "indexed": indexed,
            "failed": failed,
            "duration_ms": round(duration_ms, 2),
        })

    def log_query_stage(self, stage: str, query: str, status: str = "success", details: Dict[str, Any] = None):
        """Log one stage of a semantic query."""
        log_details = {"query": _truncate(query, 30)}
        if details:
            log_details.update(details)

        self.log_operation(f"query.{stage}", status, log_details)


# Global logger instance
logger = StructuredLogger()
