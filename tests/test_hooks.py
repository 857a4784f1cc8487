"""Tests for hook emitters and the test helpers shipped with the package."""

from prometheus_client import REGISTRY

from embedkit.application.ports.hook_emitter_port import (
    EMBED_COMPLETED,
    EMBED_FAILED,
    EMBED_STARTED,
    PROVIDER_CALL_FAILED,
    emit_safely,
)
from embedkit.domain.models import HookEvent
from embedkit.domain.vector import cosine_similarity
from embedkit.infrastructure.hooks.structlog_emitter import NoopHookEmitter, StructlogHookEmitter
from embedkit.testing.helpers import (
    MockProvider,
    RecordingHookEmitter,
    assert_similarity_in_range,
    assert_vector_dimensions,
    assert_vector_normalized,
    generate_similar_vectors,
    generate_test_vector,
)


def sample(name, labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestStructlogHookEmitter:
    """Tests for the default emitter's Prometheus accounting."""

    def test_completed_event_updates_counters(self):
        labels = {"provider": "hooks-test-ok", "status": "success"}
        before = sample("embedkit_embed_requests_total", labels)
        tokens_before = sample("embedkit_tokens_consumed_total", {"provider": "hooks-test-ok", "kind": "total"})

        StructlogHookEmitter().emit(HookEvent(
            signal=EMBED_COMPLETED,
            fields={"provider": "hooks-test-ok", "duration_ms": 12, "prompt_tokens": 4, "total_tokens": 4},
        ))

        assert sample("embedkit_embed_requests_total", labels) == before + 1
        assert sample("embedkit_tokens_consumed_total", {"provider": "hooks-test-ok", "kind": "total"}) == tokens_before + 4

    def test_started_event_counts_texts(self):
        labels = {"provider": "hooks-test-started"}
        before = sample("embedkit_texts_embedded_total", labels)

        StructlogHookEmitter().emit(HookEvent(signal=EMBED_STARTED, fields={"provider": "hooks-test-started", "input_count": 3}))

        assert sample("embedkit_texts_embedded_total", labels) == before + 3

    def test_failures_are_counted(self):
        emitter = StructlogHookEmitter()
        failed_labels = {"provider": "hooks-test-fail", "status": "failure"}
        error_labels = {"provider": "hooks-test-fail", "error_type": "ProviderError"}
        failed_before = sample("embedkit_embed_requests_total", failed_labels)
        errors_before = sample("embedkit_provider_api_errors_total", error_labels)

        emitter.emit(HookEvent(
            signal=PROVIDER_CALL_FAILED, severity="error",
            fields={"provider": "hooks-test-fail", "error_type": "ProviderError"},
        ))
        emitter.emit(HookEvent(signal=EMBED_FAILED, severity="error", fields={"provider": "hooks-test-fail", "duration_ms": 5}))

        assert sample("embedkit_embed_requests_total", failed_labels) == failed_before + 1
        assert sample("embedkit_provider_api_errors_total", error_labels) == errors_before + 1

    def test_metrics_can_be_disabled(self):
        labels = {"provider": "hooks-test-off", "status": "success"}

        StructlogHookEmitter(record_metrics=False).emit(HookEvent(signal=EMBED_COMPLETED, fields={"provider": "hooks-test-off"}))

        assert sample("embedkit_embed_requests_total", labels) == 0.0


class TestEmitSafely:
    def test_builds_event(self):
        emitter = RecordingHookEmitter()
        emit_safely(emitter, EMBED_FAILED, severity="error", request_id="r-1")

        assert emitter.events == [HookEvent(signal=EMBED_FAILED, severity="error", fields={"request_id": "r-1"})]

    def test_swallows_emitter_errors(self):
        class Broken(NoopHookEmitter):
            def emit(self, event):
                raise RuntimeError("sink down")

        emit_safely(Broken(), EMBED_STARTED, provider="mock")


class TestHelpers:
    """Tests for embedkit.testing helpers."""

    def test_deterministic_vectors_depend_on_text(self):
        provider = MockProvider(dimensions=32, deterministic=True)

        assert provider.generate_vector("a") == provider.generate_vector("a")
        assert provider.generate_vector("a") != provider.generate_vector("b")
        assert_vector_normalized(provider.generate_vector("a"))

    def test_generate_test_vector(self):
        vec = generate_test_vector(64, seed=7)

        assert_vector_dimensions(vec, 64)
        assert_vector_normalized(vec)
        assert vec == generate_test_vector(64, seed=7)

    def test_generate_similar_vectors(self):
        base, similar = generate_similar_vectors(256, 0.9)

        assert_vector_normalized(base)
        assert_vector_normalized(similar)
        assert_similarity_in_range(cosine_similarity(base, similar), 0.5, 1.0 + 1e-6)

    def test_reset_clears_calls(self):
        provider = MockProvider(dimensions=4)
        provider.call_count = 3
        provider.calls = [["x"]]
        provider.reset()

        assert provider.call_count == 0
        assert provider.calls == []
