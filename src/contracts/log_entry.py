from datetime import datetime

from pydantic import BaseModel


class LogEntry(BaseModel):
    """
    A captured service log record. `seq` is its ordering key.
    """

    seq: int
    timestamp: datetime
    level: str
    message: str
