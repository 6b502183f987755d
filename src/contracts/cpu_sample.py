from pydantic import BaseModel, Field


class CPUSample(BaseModel):
    """
    Cumulative CPU tick counters. Only deltas between two samples are meaningful.
    """

    total_ticks: int = Field(ge=0)
    idle_ticks: int = Field(ge=0)
