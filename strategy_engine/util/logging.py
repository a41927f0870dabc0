"""
Structured logging for the strategy engine.
Cache, retrieval and sensitivity operations log through one shared logger.
"""

import logging
from typing import Any, Dict, List


def _truncate(value: str, limit: int = 50) -> str:
    return value[:limit] + "..." if len(value) > limit else value


class StructuredLogger:
    """Structured logger for cache, retrieval and sensitivity operations."""

    def __init__(self, name: str = "strategy_engine"):
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
            self.logger.warning(message)
        else:
            self.logger.info(message)

    def log_cache_operation(self, cache: str, operation: str, entry_id: str = None,
                            details: Dict[str, Any] = None, status: str = "success"):
        """Log a query-history cache operation."""
        log_details = {"cache": cache}
        if entry_id is not None:
            log_details["entry_id"] = entry_id
        if details:
            for k, v in details.items():
                log_details[k] = _truncate(v) if isinstance(v, str) else v

        self.log_operation(f"cache.{operation}", status, log_details)

    def log_retrieval(self, mode: str, requested: int, returned: int,
                      details: Dict[str, Any] = None, status: str = "success"):
        """Log a nearest-neighbor or recency retrieval."""
        log_details = {"mode": mode, "top_k": requested, "returned": returned}
        if details:
            log_details.update(details)

        self.log_operation(f"retrieval.{mode}", status, log_details)

    def log_sensitivity_run(self, method: str, samples: int, most_sensitive: str,
                            details: Dict[str, Any] = None):
        """Log a completed sensitivity analysis."""
        log_details = {
            "method": method,
            "samples": samples,
            "most_sensitive": most_sensitive
        }
        if details:
            log_details.update(details)

        self.log_operation(f"sensitivity.{method}", "success", log_details)

    def log_config_issues(self, issues: List[str]):
        """Log configuration problems found at startup."""
        for issue in issues:
            self.logger.warning(f"Config issue: {issue}")

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
