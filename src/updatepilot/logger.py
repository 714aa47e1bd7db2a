import structlog

# Map string level to integer
LEVEL_MAP = {
    "INFO": 20,
    "DEBUG": 10,
    "TRACE": 5,
}


def configure_logging(log_level: str = "INFO") -> None:
    """Configure structlog for the whole process.

    Args:
        log_level: One of INFO, DEBUG or TRACE
    """
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(LEVEL_MAP.get(log_level, 20)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,  # Disable cache to allow level updates
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    return structlog.get_logger(name)
