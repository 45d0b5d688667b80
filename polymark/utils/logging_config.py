"""
Centralized logging configuration for Polymark.
"""
import logging
import sys
from pathlib import Path
from typing import Optional


class LoggingConfig:
    """Central logging configuration"""

    _initialized = False
    _log_file_path: Optional[Path] = None

    @classmethod
    def setup_logging(cls, log_dir: Path, console_level: str = "INFO"):
        """
        Configure the root logger once per process.

        Args:
            log_dir: Directory for ``polymark.log``; created if missing
            console_level: Level name for terminal output
        """
        if cls._initialized:
            return

        log_dir.mkdir(parents=True, exist_ok=True)
        cls._log_file_path = log_dir / "polymark.log"

        logger = logging.getLogger()
        logger.setLevel(logging.DEBUG)

        # File handler
        file_handler = logging.FileHandler(cls._log_file_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

        # Console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, console_level.upper(), logging.INFO))
        console_handler.setFormatter(logging.Formatter('[%(levelname)s] %(message)s'))
        logger.addHandler(console_handler)

        cls._initialized = True
        logger.info("Logging system initialized")


__all__ = ['LoggingConfig']
