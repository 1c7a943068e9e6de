"""Engine exception hierarchy"""


class MotionError(Exception):
    """Base class for errors raised by the motion engine"""


class UnknownNodeError(MotionError, KeyError):
    """A referenced node id is not registered"""

    def __init__(self, node_id: str):
        super().__init__(node_id)
        self.node_id = node_id

    def __str__(self):
        return f"Unknown node: {self.node_id}"


class CapabilityUnavailableError(MotionError):
    """An optional timing capability could not be loaded"""


class ConfigError(MotionError, ValueError):
    """Configuration value is missing or invalid"""
