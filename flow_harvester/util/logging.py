"""
Structured logging for ingestion, index and clustering operations.
"""

import logging
from typing import Any, Dict


def _truncate(value: str, limit: int = 50) -> str:
    return value[:limit] + "..." if len(value) > limit else value


class StructuredLogger:
    """Structured logger for vector index and clustering operations."""

    def __init__(self, name: str = "flow_harvester"):
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

        if status in ("failed", "error"):
            self.logger.error(message)
        else:
            self.logger.info(message)

    def log_vector_operation(self, operation: str, record_id: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log a vector operation."""
        log_details = {"record_id": record_id}
        if details:
            log_details.update(details)

        self.log_operation(f"vector.{operation}", status, log_details)

    def log_ingest(self, message_count: int, embedded: int, reused: int, duration_ms: float):
        """Log completion of the ingestion barrier."""
        self.log_operation("cluster.ingest", "success", {
            "message_count": message_count,
            "embedded": embedded,
            "reused": reused,
            "duration_ms": round(duration_ms, 2),
        })

    def log_cluster_run(self, seed_count: int, topic_count: int, assigned_count: int, duration_ms: float, status: str = "success"):
        """Log a finished clustering run."""
        self.log_operation("cluster.run", status, {
            "seed_count": seed_count,
            "topic_count": topic_count,
            "assigned_count": assigned_count,
            "duration_ms": round(duration_ms, 2),
        })

    def log_cluster_failure(self, kind: str, error: Exception):
        """Log the terminal failure of a clustering run."""
        self.log_operation("cluster.run", "failed", {
            "kind": kind,
            "error": _truncate(str(error), 100),
        })

    def log_seed(self, seed_id: str, title: str, claimed: int):
        self.logger.debug(
            f"Operation: cluster.seed, Status: claimed, Details: "
            f"{{'seed_id': {seed_id!r}, 'title': {_truncate(title)!r}, 'claimed': {claimed}}}"
        )

    # Standard logging method for compatibility
    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
