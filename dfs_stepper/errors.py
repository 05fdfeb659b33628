class DFSStepperError(Exception):
    pass


class InvalidSpeedError(DFSStepperError, ValueError):
    """Speed (or timer delay) is not a positive integer number of milliseconds."""


class MalformedGraphError(DFSStepperError, ValueError):
    """Raised by strict graphs when an edge points at an undeclared node."""
