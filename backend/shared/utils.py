import logging

from shared.config import config


def setup_logging(service_name: str, log_level: str | None = None) -> logging.Logger:
    """Setup logging configuration for a service"""
    level = log_level or config.get("log_level", "INFO")
    logger = logging.getLogger(service_name)
    logger.setLevel(getattr(logging, level.upper()))

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(f"%(asctime)s - {service_name} - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe storage"""
    invalid_chars = '<>:"/\\|?*'
    for char in invalid_chars:
        filename = filename.replace(char, "_")
    return filename


__all__ = ["config", "sanitize_filename", "setup_logging"]
