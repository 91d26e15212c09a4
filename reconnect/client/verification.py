import time
import random
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    verified: bool
    fields: dict = field(default_factory=dict)
    error: Optional[str] = None


class DocumentVerifier(Protocol):
    def verify(self, document: bytes) -> VerificationResult:
        ...


SYNTHETIC_FIELDS = {
    "case_id": "FIR/01/2025/487",
    "file_date": "15/09/2025",
    "complainant_name": "RAKESH KUMAR SHARMA",
}

UNREADABLE = "The report image was too blurry or the text was unreadable. Please try a clearer scan or photo."


class SimulatedDocumentVerifier:
    """Fake police-report check. Reads nothing from the document.

    Sleeps for `delay` seconds, then passes with probability `success_rate`
    and returns fixed synthetic fields. Not for production use.
    """

    def __init__(self, delay: float = 2.0, success_rate: float = 0.8, rng: Optional[random.Random] = None, sleep=time.sleep):
        self.delay = delay
        self.success_rate = success_rate
        self.rng = rng or random.Random()
        self.sleep = sleep

    def verify(self, document: bytes) -> VerificationResult:
        if not document:
            return VerificationResult(verified=False, error="Please select the Police Report/FIR image first.")

        self.sleep(self.delay)

        if self.rng.random() < self.success_rate:
            return VerificationResult(verified=True, fields=dict(SYNTHETIC_FIELDS))

        logger.debug("Simulated verification rejected the document")
        return VerificationResult(verified=False, error=UNREADABLE)
