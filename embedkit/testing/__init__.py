from embedkit.testing.helpers import (
    MockProvider,
    QueryMockProvider,
    RecordingHookEmitter,
    assert_vector_dimensions,
    assert_vector_normalized,
    assert_similarity_in_range,
    generate_test_vector,
    generate_similar_vectors,
)
