"""Pull-based stage protocol built on native generators.

- Signal (Item | Done): outcome of one receive
- Stage/StageKind: sources, pipes, sinks and closed pipelines
- fuse / ``|``: the connector
- receive_forever, receive_one, identity, elements, folding: protocol sugar
"""

from .primitives import elements, folding, identity, receive_forever, receive_one
from .signal import Done, Item, Signal
from .stage import ClosedInput, Link, Receiver, Stage, StageKind, describe, fuse

__all__ = [
    # Signals
    "Signal", "Item", "Done",
    # Stages
    "Stage", "StageKind", "Receiver", "Link", "ClosedInput", "fuse", "describe",
    # Sugar
    "receive_forever", "receive_one", "identity", "elements", "folding",
]
