import logging

NOISY_LOGGERS = ("elastic_transport", "elasticsearch", "urllib3")


def set_logging_level(level: int, quiet_transport: bool = True) -> None:
    """Set logging level for all stashquery loggers.

    Args:
        level: The logging level to set
        quiet_transport: Keep the HTTP transport loggers at WARNING
    """
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    logging.getLogger("stashquery").setLevel(level)
    loggers = [logging.getLogger(name) for name in logging.root.manager.loggerDict]
    for logger in loggers:
        if logger.name.startswith("stashquery") or logger.name == "__main__":
            logger.setLevel(level)

    if quiet_transport:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
