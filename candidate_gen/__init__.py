"""
Candidate Generation module for the recommendation pipeline.

Builds the candidate pool a user's recommendations are ranked from by merging
several catalog sources:
- Top-rated movies in each of the user's preferred genres
- Top-rated movies overall
- Most recent movies overall

Usage:
    from candidate_gen.retrieval import CandidateRetriever
    retriever = CandidateRetriever(catalog)
    candidates = retriever.retrieve(user)
"""

__version__ = "1.0.0"
