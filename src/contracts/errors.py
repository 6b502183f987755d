class AutoRTTError(Exception):
    """
    Base class for errors raised by the RTT probing engine and its collaborators.
    """


class ProbeError(AutoRTTError):
    """
    A single host could not be probed (no reachable port, timeout).
    """


class InsufficientDataError(AutoRTTError):
    """
    Fewer hosts answered than the configured minimum.

    The number of live responders is kept on the exception so callers can
    still report it.
    """

    def __init__(self, alive: int, required: int):
        self.alive = alive
        self.required = required
        super().__init__(
            f"not enough responding hosts ({alive} < {required})"
        )


class HostProviderError(AutoRTTError):
    """
    The list of active hosts could not be obtained.
    """


class CPUSampleError(AutoRTTError):
    """
    A CPU utilization sample could not be taken.
    """


class ShapingAdjustmentError(AutoRTTError):
    """
    The shaping parameter could not be changed or the shaped interfaces
    could not be discovered.
    """
