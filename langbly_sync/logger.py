import logging
import os
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_MODES = ('off', 'info', 'debug')

# Cache for log mode to avoid repeated environment reads
_log_mode_cache = None
_log_file_cache: Optional[Path] = None


def _get_log_mode() -> str:
    """Get log mode from the environment (defaults to 'info')."""
    global _log_mode_cache
    if _log_mode_cache is not None:
        return _log_mode_cache

    log_mode = os.environ.get('LANGBLY_LOG_MODE', 'info').strip().lower()
    if log_mode not in LOG_MODES:
        log_mode = 'info'
    _log_mode_cache = log_mode
    return log_mode


def _get_log_file() -> Optional[Path]:
    """Get the optional log file path."""
    if _log_file_cache is not None:
        return _log_file_cache
    env_file = os.environ.get('LANGBLY_LOG_FILE')
    return Path(env_file) if env_file else None


def _levels_for(log_mode: str):
    if log_mode == 'debug':
        return logging.DEBUG, logging.DEBUG
    if log_mode == 'off':
        # Off mode: a level higher than CRITICAL disables everything
        return logging.CRITICAL + 1, logging.CRITICAL + 1
    return logging.INFO, logging.INFO


def _configure(logger: logging.Logger, log_mode: str) -> None:
    """Bring an existing logger in line with the current log mode."""
    logger_level, console_level = _levels_for(log_mode)
    logger.setLevel(logger_level)
    log_format = logging.Formatter(LOG_FORMAT)
    log_file = _get_log_file()

    has_file_handler = any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    has_console_handler = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in logger.handlers
    )

    # File handler - only when a log file is configured and logging is on
    if log_mode != 'off' and log_file and not has_file_handler:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        f_handler = logging.FileHandler(log_file, encoding='utf-8')
        f_handler.setLevel(logging.DEBUG)
        f_handler.setFormatter(log_format)
        logger.addHandler(f_handler)
    elif (log_mode == 'off' or not log_file) and has_file_handler:
        for handler in [h for h in logger.handlers if isinstance(h, logging.FileHandler)]:
            handler.close()
            logger.removeHandler(handler)

    if log_mode != 'off' and not has_console_handler:
        c_handler = logging.StreamHandler()
        c_handler.setFormatter(log_format)
        logger.addHandler(c_handler)

    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(console_level)


def set_log_mode(log_mode: str, log_file: Optional[Path] = None) -> None:
    """
    Switch the log mode (and optional log file) for every logger created by get_logger.

    Called by the pipeline once the application config is loaded.
    """
    global _log_mode_cache, _log_file_cache
    log_mode = (log_mode or 'info').lower()
    if log_mode not in LOG_MODES:
        raise ValueError(f"Invalid log mode '{log_mode}', expected one of {', '.join(LOG_MODES)}")
    _log_mode_cache = log_mode
    if log_file is not None:
        _log_file_cache = Path(log_file)

    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        if not logger_name.startswith('langbly_sync'):
            continue
        logger = logging.getLogger(logger_name)
        if logger.handlers:
            _configure(logger, log_mode)


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    _configure(logger, _get_log_mode())
    # Records still reach the root logger so pytest's caplog can see them
    return logger
