"""
Structured logging for memory, checkpoint and persistence operations.
"""

import logging
from typing import Any, Dict, Optional


def _truncate(value: str, limit: int = 50) -> str:
    return value[:limit] + "..." if len(value) > limit else value


class StructuredLogger:
    """Structured logger for memory and state operations."""

    def __init__(self, name: str = "cortex"):
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

    def log_operation(self, operation: str, status: str, details: Optional[Dict[str, Any]] = None,
                      level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.log(level, message)

    def log_memory_operation(self, operation: str, key: str, content: Optional[str] = None,
                             details: Optional[Dict[str, Any]] = None, status: str = "success"):
        """Log a memory write/delete/search. Embeddings are never logged."""
        log_details = {"key": key}
        if content is not None:
            log_details["content"] = _truncate(content)
        if details:
            log_details.update(details)

        self.log_operation(f"memory.{operation}", status, log_details, level=logging.DEBUG)

    def log_checkpoint_operation(self, operation: str, checkpoint_id: str,
                                 details: Optional[Dict[str, Any]] = None, status: str = "success"):
        """Log a checkpoint save/load/delete/restore/branch."""
        log_details = {"checkpoint_id": checkpoint_id}
        if details:
            log_details.update(details)

        self.log_operation(f"checkpoint.{operation}", status, log_details)

    def log_eviction(self, store: str, evicted: str, limit: int):
        """Log capacity eviction of the oldest entry."""
        self.log_operation(f"{store}.evict", "evicted", {"evicted": evicted, "limit": limit},
                           level=logging.DEBUG)

    def log_persistence(self, operation: str, path: str, details: Optional[Dict[str, Any]] = None,
                        status: str = "success"):
        """Log a whole-file persist/load."""
        log_details = {"path": str(path)}
        if details:
            log_details.update(details)

        level = logging.WARNING if status != "success" else logging.INFO
        self.log_operation(f"persistence.{operation}", status, log_details, level=level)


# Global logger instance
logger = StructuredLogger()
