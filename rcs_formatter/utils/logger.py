import logging
from datetime import datetime


class Logger:
    """Centralized logging utilities for the RCS Formatter application"""

    @staticmethod
    def log_validation_event(format_type: str = "", errors: int = 0, warnings: int = 0,
                             infos: int = 0, source: str = "api"):
        """Log a compliance check summary for monitoring"""
        logger = logging.getLogger("compliance")

        log_data = {
            "timestamp": datetime.now().isoformat(),
            "source": source,
            "format_type": format_type or "unknown",
            "errors": errors,
            "warnings": warnings,
            "info": infos,
            "compliant": errors == 0
        }

        if errors:
            logger.info(f"Compliance check failed: {log_data}")
        else:
            logger.info(f"Compliance check passed: {log_data}")

    @staticmethod
    def log_export_event(template_type: str = "", suggestions: int = 0, success: bool = False):
        """Log RBM payload generation"""
        logger = logging.getLogger("rbm_export")

        log_data = {
            "timestamp": datetime.now().isoformat(),
            "template_type": template_type or "unknown",
            "suggestions": suggestions,
            "success": success
        }

        logger.info(f"RBM Export: {log_data}")


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_root_logger(level: str = "INFO") -> None:
    """Configure the root logger once for the whole application."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
