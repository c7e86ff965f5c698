"""Concurrent mirroring of a wiki's category tree to disk."""

from wiki_mirror.mirror.distributor import Chunk, distribute
from wiki_mirror.mirror.orchestrator import MirrorOrchestrator, mirror
from wiki_mirror.mirror.worker import MirrorWorker

__all__ = [
    "Chunk",
    "MirrorOrchestrator",
    "MirrorWorker",
    "distribute",
    "mirror",
]
