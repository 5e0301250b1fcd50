"""Cosine similarity and top-K ranking over embedding vectors."""

from typing import Sequence

import numpy as np

from errors import DimensionMismatch
from models import ScoredIndex

Vector = Sequence[float]


def _check_dimensions(query: Vector, corpus: Sequence[Vector]) -> None:
    expected = len(query)
    for idx, vector in enumerate(corpus):
        if len(vector) != expected:
            raise DimensionMismatch(expected, len(vector), index=idx)


def cosine_similarity(a: Vector, b: Vector) -> float:
    """Cosine of the angle between a and b; NaN if either has zero norm."""
    if len(a) != len(b):
        raise DimensionMismatch(len(a), len(b))
    return float(_cosine_scores(np.asarray(a, dtype=np.float64), [b])[0])


def _cosine_scores(query: np.ndarray, corpus: Sequence[Vector]) -> np.ndarray:
    matrix = np.asarray(corpus, dtype=np.float64).reshape(len(corpus), query.shape[0])
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = (matrix @ query) / (np.linalg.norm(matrix, axis=1) * np.linalg.norm(query))
    # zero norms yield 0/0 -> nan
    return np.clip(scores, -1.0, 1.0)


def score(query: Vector, corpus: Sequence[Vector]) -> list[ScoredIndex]:
    """Score every corpus vector against query, in corpus order.

    Raises:
        DimensionMismatch: If any corpus vector's length differs from the query's.
    """
    if not corpus:
        return []
    _check_dimensions(query, corpus)
    scores = _cosine_scores(np.asarray(query, dtype=np.float64), corpus)
    return [ScoredIndex(index=i, score=float(s)) for i, s in enumerate(scores)]


def rank(query: Vector, corpus: Sequence[Vector], k: int) -> list[int]:
    """Return indices of the k corpus vectors most similar to query.

    Ordered by descending cosine similarity. Equal scores keep corpus order
    and NaN scores sort last. The result has min(k, len(corpus)) entries.

    Raises:
        DimensionMismatch: If any corpus vector's length differs from the query's.
    """
    if k <= 0 or not corpus:
        return []
    _check_dimensions(query, corpus)
    scores = _cosine_scores(np.asarray(query, dtype=np.float64), corpus)
    order = np.argsort(-scores, kind="stable")
    return [int(i) for i in order[:k]]
