"""
Retrieval module for multi-source candidate generation.

This module provides:
- RetrievalConfig: Per-source limits and fan-out settings
- CandidatePool: Id-keyed, deduplicating candidate container
- CandidateRetriever: Merges genre, top-rated and latest sources
"""

from .config import RetrievalConfig
from .retriever import CandidatePool, CandidateRetriever, preferred_genres

__all__ = [
    "RetrievalConfig",
    "CandidatePool",
    "CandidateRetriever",
    "preferred_genres",
]
