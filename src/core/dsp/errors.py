"""
DSP Error Types
"""


class InvalidArgumentError(ValueError):
    """Raised when a response computation is called with structurally invalid arguments"""
    pass
