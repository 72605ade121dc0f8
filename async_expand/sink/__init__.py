from .drain import drain
from .sink import BufferSink, Sink

__all__ = ("BufferSink", "Sink", "drain")
