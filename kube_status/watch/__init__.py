"""
The watch module turns change streams from a cluster into a single sequence of
tagged events.

- A WatchSource opens one stream of events per kind of object.
- A Selector filters each stream down to the objects of interest.
- The WatchMultiplexer forwards every stream into one consumer loop.
"""

from .multiplexer import WatchMultiplexer
from .selector import Selector, SelectorType
from .source import WatchSource

__all__ = [
    "WatchMultiplexer",
    "Selector",
    "SelectorType",
    "WatchSource",
]
