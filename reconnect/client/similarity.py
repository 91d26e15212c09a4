from dataclasses import dataclass
from typing import Optional, Protocol, Sequence
import numpy as np

from reconnect.client.verification import VerificationResult

HIGH_MATCH_THRESHOLD = 0.8
MEDIUM_MATCH_THRESHOLD = 0.6


class ImageEmbedder(Protocol):
    def embed(self, image: bytes) -> Sequence[float]:
        ...


@dataclass(frozen=True)
class MatchResult:
    score: float
    likelihood: str  # High/Medium/Low
    notes: str


def cosine(a: Sequence[float], b: Sequence[float]) -> float:
    u = np.asarray(a, dtype=float)
    v = np.asarray(b, dtype=float)

    if u.shape != v.shape:
        raise ValueError(f"Embedding shapes differ: {u.shape} vs {v.shape}")

    denom = np.linalg.norm(u) * np.linalg.norm(v)
    if denom == 0:
        raise ValueError("Cannot compare a zero vector")

    return float(np.clip(np.dot(u, v) / denom, -1.0, 1.0))


def match_likelihood(score: float) -> str:
    if score > HIGH_MATCH_THRESHOLD:
        return "High"
    if score > MEDIUM_MATCH_THRESHOLD:
        return "Medium"
    return "Low"


def compare_images(embedder: ImageEmbedder, mine: bytes, theirs: bytes) -> MatchResult:
    score = cosine(embedder.embed(mine), embedder.embed(theirs))
    likelihood = match_likelihood(score)

    if likelihood == "High":
        notes = f"The feature vector similarity score of {score:.3f} indicates a high likelihood of a match."
    elif likelihood == "Medium":
        notes = f"The similarity score of {score:.3f} is moderate. Further manual checks are recommended."
    else:
        notes = f"The low similarity score of {score:.3f} suggests this is likely not the same item."

    return MatchResult(score=score, likelihood=likelihood, notes=notes)


def can_reveal_contact(match: Optional[MatchResult], verification: Optional[VerificationResult]) -> bool:
    """Client-side gate only; /api/contact itself checks nothing."""
    if match is None or verification is None:
        return False

    return match.likelihood == "High" and verification.verified
