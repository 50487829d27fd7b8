"""
Provider pool rotation.

Spreads load and rate-limit exposure across N credentials x M models. The
credential index cycles fastest: every credential is tried against the
current model before the model index advances. One full cycle (N x M calls
to next()) visits every pair exactly once.

The rotator is the only state shared across concurrent requests. Its
critical section is two integer updates with no awaits, so a plain
threading.Lock is enough and never blocks the event loop for long.
"""

import threading
from dataclasses import dataclass
from typing import Sequence

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProviderPair:
    """
    One (credential, model) entry of the pool.

    Attributes:
        credential: Name of the credential (never the secret itself)
        model: Model identifier
    """

    credential: str
    model: str


class ProviderPoolRotator:
    """
    Round-robin over credential/model pairs.

    Attributes:
        credentials: Credential names, in rotation order
        models: Model names, in rotation order
    """

    def __init__(self, credentials: Sequence[str], models: Sequence[str]):
        if not credentials:
            raise ValueError("ProviderPoolRotator needs at least one credential")
        if not models:
            raise ValueError("ProviderPoolRotator needs at least one model")

        self.credentials = tuple(credentials)
        self.models = tuple(models)
        self._credential_index = 0
        self._model_index = 0
        self._lock = threading.Lock()

        logger.info(
            "Provider pool initialized",
            credentials=len(self.credentials),
            models=list(self.models),
            pool_size=self.size,
        )

    @property
    def size(self) -> int:
        """Number of distinct pairs (credentials x models)."""
        return len(self.credentials) * len(self.models)

    def next(self) -> ProviderPair:
        """
        Return the current pair and advance the pointer.

        The credential index advances on every call; the model index
        advances only when the credential index wraps back to 0.
        """
        with self._lock:
            pair = ProviderPair(
                credential=self.credentials[self._credential_index],
                model=self.models[self._model_index],
            )
            self._credential_index = (self._credential_index + 1) % len(self.credentials)
            if self._credential_index == 0:
                self._model_index = (self._model_index + 1) % len(self.models)
        return pair

    def pairs(self) -> list[ProviderPair]:
        """Every pair in rotation order starting from (0, 0)."""
        return [
            ProviderPair(credential=credential, model=model)
            for model in self.models
            for credential in self.credentials
        ]

    def __repr__(self) -> str:
        return f"ProviderPoolRotator(credentials={len(self.credentials)}, models={list(self.models)})"
