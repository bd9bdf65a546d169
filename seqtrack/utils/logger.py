import logging
import os
from colorama import init, Fore, Style


class Logger:
    """
    Singleton class to manage logs in a centralized way with colors in the
    terminal.
    """

    _instance = None  # Stores the singleton instance

    LOG_LEVELS = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    def __new__(cls, log_file="seqtrack.log", log_level="INFO"):
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
            cls._instance._initialize(log_file, log_level)
        return cls._instance

    def _initialize(self, log_file, log_level):
        """Initializes the logger configuration."""
        init(autoreset=True)

        self.logger = logging.getLogger("SeqTrackLogger")
        self.logger.setLevel(self.LOG_LEVELS.get(log_level.upper(), logging.INFO))
        self.log_path = None

        # Only our own handlers count, pytest attaches its own to the root
        if not self.logger.handlers:
            if log_file:
                self.log_path = os.path.join(os.getcwd(), str(log_file))
                file_handler = logging.FileHandler(self.log_path)
                file_handler.setFormatter(
                    logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
                )
                self.logger.addHandler(file_handler)

            # Diagnostics go to stderr so command output stays clean
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(self.ColoredFormatter())
            self.logger.addHandler(console_handler)

    def log(self, message, level="INFO"):
        """
        Logs a message with the specified level.

        Args:
            message (str): The message to be logged.
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        """
        log_level = self.LOG_LEVELS.get(level.upper(), logging.INFO)
        self.logger.log(log_level, message)

    def set_log_level(self, log_level):
        """Allows changing the log level dynamically."""
        level = self.LOG_LEVELS.get(log_level.upper(), logging.INFO)
        self.logger.setLevel(level)
        self.log(f"Logger level set to {log_level.upper()}", "DEBUG")

    @classmethod
    def reset(cls):
        """Drops the singleton and its handlers (used between CLI runs and tests)."""
        logger = logging.getLogger("SeqTrackLogger")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        cls._instance = None

    class ColoredFormatter(logging.Formatter):
        """Formatter that adds colors to console output."""

        COLORS = {
            logging.DEBUG: Fore.CYAN,
            logging.INFO: Fore.GREEN,
            logging.WARNING: Fore.YELLOW,
            logging.ERROR: Fore.RED,
            logging.CRITICAL: Fore.RED + Style.BRIGHT,
        }

        def format(self, record):
            log_color = self.COLORS.get(record.levelno, Fore.WHITE)
            return f"{log_color}[{record.levelname}] {record.getMessage()}{Style.RESET_ALL}"
