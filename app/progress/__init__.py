from app.progress.models import ProgressEvent
from app.progress.progress_log import ProgressLog, ScopedProgress
from app.progress.sink import LoggingProgressSink, ProgressSink

__all__ = [
    "LoggingProgressSink",
    "ProgressEvent",
    "ProgressLog",
    "ProgressSink",
    "ScopedProgress",
]
