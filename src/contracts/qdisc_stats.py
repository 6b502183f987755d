from pydantic import BaseModel


class QdiscStats(BaseModel):
    """
    Statistics of one CAKE qdisc as reported by `tc -s qdisc`.
    """

    interface: str
    qdisc: str
    stats: str = ""
    rtt: str = "N/A"
