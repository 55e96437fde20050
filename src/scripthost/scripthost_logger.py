"""
Multi-threaded logger for scripthost. Every line is emitted as JSON so that
log output from background download threads stays parseable.
"""

import inspect
import logging
import threading
from datetime import datetime

from pydantic import BaseModel


class LogLine(BaseModel):
    """
    Represents a line in the scripthost log
    """

    time: str
    level: str
    thread: str
    caller_file: str
    caller_name: str
    caller_line: int
    message: str


class ScripthostLogger:
    """
    Logger class
    """

    def __init__(self, name: str = "scripthost") -> None:
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

    def log(self, debug_message: str, level: int, sanitized_error_message: str = "", stacklevel: int = 1) -> None:
        """
        Log the debug and sanitized messages using the logger

        ``stacklevel`` selects which frame is reported as the caller: 1 is the
        direct caller, higher values skip logging helpers in between.
        """

        debug_message = debug_message.replace("'", '"').replace("\n", " ")
        sanitized_error_message = sanitized_error_message.replace("'", '"').replace("\n", " ")
        if sanitized_error_message:
            debug_message = f"{debug_message} ({sanitized_error_message})"

        # Collect details about the callee
        curframe = inspect.currentframe()
        calframe = inspect.getouterframes(curframe, 2)
        caller = calframe[min(stacklevel, len(calframe) - 1)]
        caller_file = caller[1].split("/")[-1]
        caller_line = caller[2]
        caller_name = caller[3]

        debug_log_line = LogLine(
            time=str(datetime.now()),
            level=logging.getLevelName(level),
            thread=threading.current_thread().name,
            caller_file=caller_file,
            caller_name=caller_name,
            caller_line=caller_line,
            message=debug_message,
        )

        self.logger.log(level=level, msg=debug_log_line.model_dump_json())
