"""Console logging utilities for the CHIP-8 interpreter and its frontends.

This module provides a small leveled console logger with optional colours and
elapsed-time prefixes, an interpreter-specific logger for machine events, and
a tqdm progress bar for long headless runs.
"""

import time
import sys
from typing import Optional

from tqdm import tqdm

from chip8vm.errors import Chip8Error

class ConsoleLogger:
    """Flexible console logger with level filtering and formatters."""

    def __init__(
        self,
        name: str = "chip8vm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.use_colors = (
            use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, flush=True)

    def debug(self, message: str):
        """Log debug message."""
        self.log("DEBUG", message)

    def info(self, message: str):
        """Log info message."""
        self.log("INFO", message)

    def warning(self, message: str):
        """Log warning message."""
        self.log("WARNING", message)

    def error(self, message: str):
        """Log error message."""
        self.log("ERROR", message)

class InterpreterLogger(ConsoleLogger):
    """Logger for interpreter lifecycle events."""

    def __init__(self, name: str = "chip8vm", **kwargs):
        super().__init__(name, **kwargs)

    def log_program_loaded(self, size: int, source: Optional[str] = None):
        origin = f" from {source}" if source else ""
        self.info(f"Loaded program{origin} ({size} bytes)")

    def log_program_rejected(self, error: Chip8Error, source: Optional[str] = None):
        origin = f" {source}" if source else ""
        self.error(f"Rejected program{origin}: {error}")

    def log_fault(self, error: Chip8Error, cycles: int):
        self.error(f"Halted after {cycles} cycles: {error}")

    def log_ignored_key(self, index: int):
        self.debug(f"Ignoring key index {index} (valid range is 0x0-0xF)")

    def log_run_summary(self, cycles: int, elapsed: float):
        """Log executed cycles and the effective instruction rate."""
        rate = cycles / elapsed if elapsed > 0 else 0.0
        self.info(f"Executed {cycles:,} cycles in {elapsed:.2f}s ({rate:,.0f} Hz)")

def progress_bar(n: int, desc: Optional[str] = None, **kwargs) -> tqdm:
    """Build a tqdm progress bar for ``n`` units of headless work."""
    for kwarg in ("total", "unit"):
        kwargs.pop(kwarg, None)

    if desc is None:
        desc = f"Running ({n:,} frames)"

    return tqdm(total=n, desc=desc, unit="frame", **kwargs)
