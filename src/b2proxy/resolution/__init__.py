"""Version reconciliation and merge pipeline."""

from b2proxy.resolution.composer import Composer, PdfComposer, compose
from b2proxy.resolution.deduplicator import Partition, partition
from b2proxy.resolution.orchestrator import Resolution, ResolutionKind, resolve

__all__ = [
    "Composer",
    "Partition",
    "PdfComposer",
    "Resolution",
    "ResolutionKind",
    "compose",
    "partition",
    "resolve",
]
