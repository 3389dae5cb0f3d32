"""Collectors: file selection, artifact writing and run orchestration.

The Orchestrator (``Collector``) feeds command targets and per-category
glob lists from a profile to the ArtifactWriter and CollectionWalker.
"""

from diagcollect.collectors.budget import SizeBudget
from diagcollect.collectors.orchestrator import Collector
from diagcollect.collectors.profile import load_profile
from diagcollect.collectors.walker import CollectionWalker
from diagcollect.collectors.writer import ArtifactWriter

__all__ = [
    "ArtifactWriter",
    "CollectionWalker",
    "Collector",
    "SizeBudget",
    "load_profile",
]
