import os
from datetime import datetime, timezone
import logging
import sys
import traceback
import json
import contextvars
from typing import Optional, Any, Type

import requests

# ANSI Color codes for terminal output
class Colors:
    RESET = '\033[0m'
    DEBUG = '\033[90m'      # Gray/Dim
    INFO = ''               # No color (default terminal color)
    WARNING = '\033[93m'    # Yellow
    ERROR = '\033[91m'      # Red
    CRITICAL = '\033[95m'   # Bright Magenta

# Unicode symbols for log levels (searchable in production logs)
LOG_SYMBOLS = {
    'DEBUG': '⚪',
    'INFO': '🔵',
    'WARNING': '🟡',
    'ERROR': '🔴',
    'CRITICAL': '🟣'
}

LOG_COLORS = {
    'DEBUG': Colors.DEBUG,
    'INFO': Colors.INFO,
    'WARNING': Colors.WARNING,
    'ERROR': Colors.ERROR,
    'CRITICAL': Colors.CRITICAL
}

OUTPUT_DIR = os.getenv("OUTPUT_DIR", ".")
LOG_DIR = os.getenv("LOG_DIR", OUTPUT_DIR)
LOG_FORMAT = os.getenv("LOG_FORMAT", "JSON").upper()  # JSON or TEXT
start_time = datetime.now(tz=timezone.utc)
log_filename = os.path.join(LOG_DIR, f"conformance_{start_time.strftime('%Y_%m_%d_%H_%M_%S')}.log")

# Per-run context, attached to every record emitted inside a LogContext
run_id_var = contextvars.ContextVar('run_id', default='')
source_var = contextvars.ContextVar('source', default='')


def _context_fields() -> dict:
    fields = {}
    if run_id_var.get():
        fields['run_id'] = run_id_var.get()
    if source_var.get():
        fields['source'] = source_var.get()
    return fields


class LogContext:
    """Sets run_id and/or source for the duration of a with-block. Nests."""

    def __init__(self, run_id: Optional[str] = None,
                 source: Optional[str] = None) -> None:
        self.run_id: Optional[str] = run_id
        self.source: Optional[str] = source
        self.run_id_token: Optional[contextvars.Token] = None
        self.source_token: Optional[contextvars.Token] = None

    def __enter__(self) -> 'LogContext':
        if self.run_id is not None:
            self.run_id_token = run_id_var.set(self.run_id)
        if self.source is not None:
            self.source_token = source_var.set(self.source)
        return self

    def __exit__(self, exc_type: Optional[Type[BaseException]], exc_val: Optional[BaseException], exc_tb: Optional[Any]) -> None:
        if self.run_id_token is not None:
            run_id_var.reset(self.run_id_token)
        if self.source_token is not None:
            source_var.reset(self.source_token)


class TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        context_str = " ".join(f"{key}={value}" for key, value in _context_fields().items())
        if context_str:
            context_str = f"[{context_str}] "

        level_name = record.levelname
        color = LOG_COLORS.get(level_name, Colors.RESET)
        symbol = LOG_SYMBOLS.get(level_name, '')
        reset = Colors.RESET

        # pylint: disable=protected-access
        self._style._fmt = f'{color}[%(levelname)s] {symbol} %(asctime)s {context_str}[%(filename)s:%(lineno)d] %(message)s{reset}'

        return super().format(record)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'level': record.levelname,
            'symbol': LOG_SYMBOLS.get(record.levelname, ''),
            'message': record.getMessage(),
            'location': f"{record.filename}:{record.lineno}",
            'timestamp': self.formatTime(record),
        }
        log_data.update(_context_fields())

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class SlackNotifyingLogger(logging.Logger):
    """Logger that also posts every error to a Slack webhook."""
    slack_webhook_url: Optional[str]
    slack_channel: Optional[str]
    slack_username: str

    def __init__(self, name: str, level: int = logging.NOTSET) -> None:
        super().__init__(name, level)
        self.slack_webhook_url = os.getenv('SLACK_WEBHOOK_URL')
        self.slack_channel = os.getenv('SLACK_CHANNEL')
        self.slack_username = os.getenv("SLACK_USERNAME", "graph-conformance")

    def error(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        super().error(msg, *args, **kwargs)

        if not self.slack_webhook_url:
            return

        if isinstance(msg, Exception):
            error_message = str(msg)
            stack_trace = ''.join(traceback.format_exception(type(msg), msg, msg.__traceback__))
            if LOG_FORMAT == "JSON":
                value = json.dumps({"error": error_message, "stack_trace": stack_trace, **_context_fields()})
            else:
                value = f"Error: {error_message}\n\nStack Trace:\n{stack_trace}"
        else:
            value = json.dumps(str(msg)) if LOG_FORMAT == "JSON" else str(msg)

        payload = {
            'channel': self.slack_channel,
            'username': self.slack_username,
            "text": "ERROR",
            "attachments": [{
                "color": "#FF0000",
                "fields": [{
                    "title": "Conformance Error",
                    "value": value,
                    "short": False
                }]
            }]
        }
        try:
            requests.post(
                self.slack_webhook_url,
                data=json.dumps(payload),
                headers={'Content-Type': 'application/json'},
                timeout=10
            )
        except requests.RequestException as e:
            super().error(f"Failed to send Slack notification: {e}")


def get_formatter() -> logging.Formatter:
    if LOG_FORMAT == "JSON":
        return JsonFormatter()
    return TextFormatter()


formatter = get_formatter()

log_level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())

stream_handler = logging.StreamHandler(sys.stdout)
stream_handler.setFormatter(formatter)

# The logger class only applies to loggers created after it is set
if os.getenv("ENABLE_SLACK_NOTIFICATION") == '1':
    _previous_logger_class = logging.getLoggerClass()
    logging.setLoggerClass(SlackNotifyingLogger)
    logger = logging.getLogger("conformance")
    logging.setLoggerClass(_previous_logger_class)
else:
    logger = logging.getLogger("conformance")
logger.setLevel(log_level)
logger.addHandler(stream_handler)


if os.getenv("ENABLE_FILE_LOGGING"):
    try:
        if not os.path.exists(LOG_DIR):
            os.makedirs(LOG_DIR)
        file_handler = logging.FileHandler(log_filename)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as e:
        print(f"Error creating log file. Reason = {e}. Proceeding")
