"""
Debug logging for model requests and responses.

When AA_DEBUG=1, every request sent to the generative model, every raw response
and every response that fails validation is written as a JSON file under
{data_dir}/debug/session_<timestamp>/.
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional


class DebugLogger:
    """
    Writes one JSON file per logged event into a per-session directory.
    """

    def __init__(self, data_dir: Optional[Path] = None, enabled: Optional[bool] = None):
        """
        Initialize debug logger.

        Args:
            data_dir: Directory for log storage (defaults to the configured data dir)
            enabled: Override debug enable flag, uses AA_DEBUG env var if None
        """
        if data_dir is None:
            from .config import config

            data_dir = config.data_dir
        self.data_dir = Path(data_dir)
        self.enabled = enabled if enabled is not None else is_debug_enabled()
        self.session_id = datetime.now().strftime("%Y%m%d_%H%M%S")

        if self.enabled:
            self._setup_log_directory()

    def _setup_log_directory(self) -> None:
        self.log_dir = self.data_dir / "debug"
        self.session_dir = self.log_dir / f"session_{self.session_id}"
        self.session_dir.mkdir(parents=True, exist_ok=True)

    def _write(self, step: str, payload: Dict[str, Any]) -> None:
        timestamp = datetime.now().isoformat()
        log_data = {"timestamp": timestamp, "session_id": self.session_id, "step": step, **payload}

        filename = f"{step}_{timestamp.replace(':', '-').replace('.', '_')}.json"
        with open(self.session_dir / filename, "w", encoding="utf-8") as f:
            json.dump(log_data, f, indent=2, ensure_ascii=False, default=str)

    def log_llm_request(self, request_kind: str, prompt: str, has_image: bool = False) -> None:
        """
        Log a request sent to the model.

        Args:
            request_kind: diagnose, identify, crop_info, market_prices, community or chat
            prompt: Full instruction text
            has_image: Whether an image was attached
        """
        if not self.enabled:
            return
        self._write("llm_request", {"type": "request", "request_kind": request_kind, "prompt": prompt, "has_image": has_image})

    def log_llm_response(self, request_kind: str, response_content: str) -> None:
        """Log the raw text returned by the model."""
        if not self.enabled:
            return
        self._write(
            "llm_response",
            {"type": "response", "request_kind": request_kind, "response_content": response_content, "response_length": len(response_content)},
        )

    def log_validation_error(self, error: Exception, raw_data: Any, context: str = "validation") -> None:
        """
        Log a response that could not be parsed into its typed result.

        Args:
            error: The exception that occurred
            raw_data: The raw payload that failed validation
            context: Context description for the error
        """
        if not self.enabled:
            return
        errors_method = getattr(error, "errors", None)
        self._write(
            f"{context}_validation_error",
            {
                "type": "validation_error",
                "error": str(error),
                "error_type": type(error).__name__,
                "raw_data": raw_data,
                "validation_errors": errors_method() if callable(errors_method) else [],
            },
        )


# Global debug logger instance
_debug_logger: Optional[DebugLogger] = None


def get_debug_logger(data_dir: Optional[Path] = None) -> DebugLogger:
    """Get or create the global debug logger instance."""
    global _debug_logger
    if _debug_logger is None or (data_dir is not None and _debug_logger.data_dir != Path(data_dir)):
        _debug_logger = DebugLogger(data_dir)
    return _debug_logger


def is_debug_enabled() -> bool:
    """True if AA_DEBUG=1 is set."""
    return os.getenv("AA_DEBUG", "0") == "1"
