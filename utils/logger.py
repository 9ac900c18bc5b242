# utils/logger.py
from datetime import datetime
import os

LOG_FILE_NAME = "merge.log"


def _log_dir():
    return os.getenv("WORDMERGE_LOG_DIR") or "logs"


def log(msg, level="INFO"):
    """
    Write a timestamped log entry to stdout and append it to logs/merge.log.

    Args:
        msg (str): The log message text.
        level (str, optional): Log level label (e.g., "INFO", "WARN", "ERROR"). Defaults to "INFO".

    Side effects:
        - Prints to stdout.
        - Creates the log directory if missing (WORDMERGE_LOG_DIR, else ./logs).
        - Appends entry to <log dir>/merge.log.

    Raises:
        OSError: If unable to create the log directory or write to the log file.
    """
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    entry = f"[{level} {timestamp}] {msg}"
    print(entry)

    log_dir = _log_dir()
    os.makedirs(log_dir, exist_ok=True)
    with open(os.path.join(log_dir, LOG_FILE_NAME), "a", encoding="utf-8") as f:
        f.write(entry + "\n")
