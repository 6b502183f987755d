import time
from enum import Enum

from pydantic import BaseModel, ConfigDict


class ProbeStage(str, Enum):
    QUEUED = "queued"
    PROBING = "probing"
    DONE = "done"
    FAILED = "failed"

    @property
    def rank(self) -> int:
        # done and failed are both terminal
        return {"queued": 0, "probing": 1, "done": 2, "failed": 2}[self.value]

    @property
    def is_terminal(self) -> bool:
        return self in (ProbeStage.DONE, ProbeStage.FAILED)


class ProbeStatus(BaseModel):
    """
    Data model representing the current state of a probe, as shown to observers.
    """

    model_config = ConfigDict(use_enum_values=True)

    host: str
    stage: ProbeStage
    rtt_ms: int = 0
    error: str = ""


class CompletedProbe(BaseModel):
    """
    Immutable snapshot of a probe taken when it left the in-flight store.
    """

    model_config = ConfigDict(frozen=True)

    probe: ProbeStatus
    when: float

    def as_dict(self) -> dict:
        """
        Flatten the snapshot for the dashboard, with the completion time as HH:MM:SS.
        """
        data = self.probe.model_dump()
        data["when"] = time.strftime("%H:%M:%S", time.localtime(self.when))
        return data
