"""
Embedding similarity for in-process ranking.
"""

from typing import Optional

import numpy as np

from .errors import EmbeddingDimensionError

# Score for candidates whose similarity is undefined
EMB_SENTINEL_SCORE = -1.0


def cosine_similarity(
    user_embedding: Optional[np.ndarray],
    item_embedding: Optional[np.ndarray],
) -> Optional[float]:
    """
    Cosine similarity of two embeddings.

    Args:
        user_embedding: User vector, or None
        item_embedding: Item vector, or None

    Returns:
        Similarity in [-1, 1], or None if either vector is absent, has
        zero magnitude or holds a NaN or infinite component

    Raises:
        EmbeddingDimensionError: If the vectors have different lengths
    """
    if user_embedding is None or item_embedding is None:
        return None

    u = np.asarray(user_embedding, dtype=np.float64).ravel()
    v = np.asarray(item_embedding, dtype=np.float64).ravel()
    if u.shape != v.shape:
        raise EmbeddingDimensionError(
            f"Embedding dimension mismatch: user {u.shape[0]} vs item {v.shape[0]}"
        )

    if not (np.isfinite(u).all() and np.isfinite(v).all()):
        return None

    denom = np.linalg.norm(u) * np.linalg.norm(v)
    if denom == 0 or not np.isfinite(denom):
        return None
    return float(np.dot(u, v) / denom)

