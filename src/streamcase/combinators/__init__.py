"""Stream combinators: sources, pipes and sinks.

Sources:  iterating, unfolding, replicating (plus ``elements`` from the core)
Pipes:    mapping, mapping_m, concatting, filtering, filtering_just, taking,
          dropping, taking_while, dropping_while, deduplicating, repeating,
          tracing, grouping_by, grouping, chunking, splitting_by, scanning
Sinks:    discard, summing, multiplying, consuming (plus ``folding``)

Example:
    >>> from streamcase import run, iterating, taking, scanning, consuming
    >>> run(iterating(lambda x: x + 1, 1) | taking(3) | scanning(lambda x, acc: acc + x, 0) | consuming())
    [0, 1, 3, 6]
"""

from .pipes import (
    chunking,
    concatting,
    deduplicating,
    dropping,
    dropping_while,
    filtering,
    filtering_just,
    grouping,
    grouping_by,
    mapping,
    mapping_m,
    repeating,
    scanning,
    splitting_by,
    taking,
    taking_while,
    tracing,
)
from .sinks import consuming, discard, multiplying, summing
from .sources import iterating, replicating, unfolding

__all__ = [
    # Sources
    "iterating", "unfolding", "replicating",
    # Pipes
    "mapping", "mapping_m", "concatting", "filtering", "filtering_just",
    "taking", "dropping", "taking_while", "dropping_while", "deduplicating",
    "repeating", "tracing", "grouping_by", "grouping", "chunking",
    "splitting_by", "scanning",
    # Sinks
    "discard", "summing", "multiplying", "consuming",
]
