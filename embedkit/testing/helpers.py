# embedkit/testing/helpers.py
"""
Test utilities for code that uses embedkit: a scriptable mock backend, a hook
emitter that records events, and assertions over vectors.
"""
import hashlib
import math
from typing import List, Optional

from embedkit.application.ports.embedding_provider_port import EmbeddingProviderPort
from embedkit.application.ports.hook_emitter_port import HookEmitterPort
from embedkit.domain.models import EmbeddingResponse, HookEvent, Usage, Vector
from embedkit.domain.vector import norm, normalize, to_vector


class MockProvider(EmbeddingProviderPort):
    """
    In-memory backend.

    With `deterministic=True` each vector is derived from the sha256 of its
    text, so equal texts get equal vectors. Otherwise every text gets the same
    patterned vector. `error` makes every call fail; with `fail_after` set, only
    calls after the first `fail_after` fail.
    """

    def __init__(
        self,
        name: str = "mock",
        dimensions: int = 1536,
        deterministic: bool = False,
        error: Optional[Exception] = None,
        fail_after: int = 0,
        model: str = "mock-model",
    ):
        self._name = name
        self._dimensions = dimensions
        self.deterministic = deterministic
        self.error = error
        self.fail_after = fail_after
        self.model = model
        self.call_count = 0
        self.calls: List[List[str]] = []

    def name(self) -> str:
        return self._name

    def dimensions(self) -> int:
        return self._dimensions

    def reset(self):
        self.call_count = 0
        self.calls = []

    async def embed(self, texts: List[str]) -> EmbeddingResponse:
        self.call_count += 1
        self.calls.append(list(texts))

        if self.error is not None and (self.fail_after <= 0 or self.call_count > self.fail_after):
            raise self.error

        return EmbeddingResponse(
            model=self.model,
            vectors=[self.generate_vector(text) for text in texts],
            dimensions=self._dimensions,
            usage=Usage(prompt_tokens=len(texts) * 10, total_tokens=len(texts) * 10),
        )

    def generate_vector(self, text: str) -> Vector:
        if self.deterministic:
            digest = hashlib.sha256(text.encode("utf-8")).digest()
            values = [(digest[i % 32] / 255.0) * 2 - 1 for i in range(self._dimensions)]
        else:
            values = [(i % 100) / 100.0 for i in range(self._dimensions)]
        return normalize(to_vector(values))


class QueryMockProvider(MockProvider):
    """MockProvider with a query mode; the query variant reports name '<name>-query'."""

    def for_query(self) -> EmbeddingProviderPort:
        return MockProvider(
            name=f"{self._name}-query",
            dimensions=self._dimensions,
            deterministic=self.deterministic,
            error=self.error,
            fail_after=self.fail_after,
            model=self.model,
        )


class RecordingHookEmitter(HookEmitterPort):
    def __init__(self):
        self.events: List[HookEvent] = []

    def emit(self, event: HookEvent) -> None:
        self.events.append(event)

    def signals(self) -> List[str]:
        return [e.signal for e in self.events]

    def find(self, signal: str) -> List[HookEvent]:
        return [e for e in self.events if e.signal == signal]


def assert_vector_dimensions(vec: Vector, expected: int):
    assert len(vec) == expected, f"expected {expected} dimensions, got {len(vec)}"


def assert_vector_normalized(vec: Vector, tolerance: float = 1e-4):
    n = norm(vec)
    assert abs(n - 1.0) <= tolerance, f"expected normalized vector (norm=1.0), got norm={n:f}"


def assert_similarity_in_range(similarity: float, min_val: float, max_val: float):
    assert min_val <= similarity <= max_val, f"expected similarity in [{min_val:f}, {max_val:f}], got {similarity:f}"


def generate_test_vector(dimensions: int, seed: int) -> Vector:
    """Deterministic unit vector for a given seed."""
    values = [(((seed + i) % 1000) / 1000.0) * 2 - 1 for i in range(dimensions)]
    return normalize(to_vector(values))


def generate_similar_vectors(dimensions: int, target_similarity: float):
    """
    Returns (base, similar): two unit vectors built by mixing a base vector with
    a noise vector, weighted so the cosine similarity lands near `target_similarity`.
    """
    base = generate_test_vector(dimensions, 42)
    noise = generate_test_vector(dimensions, 123)
    weight = math.sqrt(target_similarity)
    noise_weight = math.sqrt(1 - target_similarity)
    similar = [weight * b + noise_weight * n for b, n in zip(base, noise)]
    return base, normalize(to_vector(similar))
