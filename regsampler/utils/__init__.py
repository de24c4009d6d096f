from .logger import setup_logger, set_log_level, get_log_file, logger

__all__ = ['setup_logger', 'set_log_level', 'get_log_file', 'logger']
