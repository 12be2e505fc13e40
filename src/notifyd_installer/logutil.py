from __future__ import annotations
import logging, sys
from .config import InstallConfig

LOGGER_NAME = "notifyd_installer"
_LOGGER_INITIALIZED = False

def init_logging(cfg: InstallConfig) -> logging.Logger:
    global _LOGGER_INITIALIZED
    logger = logging.getLogger(LOGGER_NAME)
    if _LOGGER_INITIALIZED:
        return logger
    level = getattr(logging, cfg.log_level.upper(), logging.INFO)
    logger.setLevel(level)

    fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    if cfg.log_console:
        ch = logging.StreamHandler(sys.stdout)
        ch.setFormatter(fmt)
        ch.setLevel(level)
        logger.addHandler(ch)
    if cfg.log_file:
        try:
            fh = logging.FileHandler(cfg.log_file, encoding="utf-8")
            fh.setFormatter(fmt)
            fh.setLevel(level)
            logger.addHandler(fh)
        except OSError as e:
            logger.warning("Failed to open log file %s: %s", cfg.log_file, e)
    _LOGGER_INITIALIZED = True
    logger.debug("Logging initialized (level=%s, file=%s, console=%s)",
                 cfg.log_level, cfg.log_file, cfg.log_console)
    return logger
