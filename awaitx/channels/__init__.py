from .local import LocalChannel
from .threaded import ThreadChannel

__all__ = ["LocalChannel", "ThreadChannel"]
