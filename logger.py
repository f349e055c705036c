import logging
import os
from datetime import datetime

import pandas as pd

log = logging.getLogger(__name__)

COLUMNS = ["Timestamp", "Client", "Channel", "Status"]


def _log_file():
    # Looked up per call; SUBMISSION_LOG may change at runtime
    return os.getenv("SUBMISSION_LOG", "submissions.csv")


def log_submission(client_name, channel, status):
    """
    Appends one row to the submission log (no form answers, just the outcome).
    Best effort: returns False and warns when the file can't be written.
    """
    new_entry = {
        "Timestamp": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "Client": client_name or "Client",
        "Channel": channel,
        "Status": status,
    }

    log_file = _log_file()
    file_exists = os.path.isfile(log_file)

    df = pd.DataFrame([new_entry], columns=COLUMNS)
    try:
        df.to_csv(log_file, mode='a', header=not file_exists, index=False)
    except OSError as e:
        log.warning("Could not write submission log %s (%s/%s): %s", log_file, channel, status, e)
        return False
    return True


def load_logs():
    """
    Reads the log file for the Dashboard.
    """
    log_file = _log_file()
    if os.path.exists(log_file):
        try:
            return pd.read_csv(log_file)
        except (pd.errors.EmptyDataError, pd.errors.ParserError):
            # If file is corrupt, return empty
            return pd.DataFrame(columns=COLUMNS)
    # If no logs yet, return empty structure
    return pd.DataFrame(columns=COLUMNS)
