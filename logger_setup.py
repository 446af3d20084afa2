# Module for setting up logging
import logging
import sys
import os

def setup_logging(log_file, level=logging.INFO):
    """Sets up logging to console and, when a log file is given, to that file."""
    log_formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers so repeated calls do not duplicate output
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    # File handler
    if log_file:
        try:
            log_dir = os.path.dirname(log_file)
            if log_dir and not os.path.exists(log_dir):
                os.makedirs(log_dir)

            file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
            file_handler.setFormatter(log_formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            # Make failure to open log file fatal
            print(f"Error: Could not set up file logging to {log_file}: {e}", file=sys.stderr)
            sys.exit(1)

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    root_logger.addHandler(console_handler)

    logging.info("Logging setup complete.")
