"""Tests for RetryPolicy eligibility and backoff math."""

import pytest

from reasoning_gateway.providers.resilience import DEFAULT_MAX_INTERVAL, RetryPolicy
from reasoning_gateway.types import FailureLabel


class TestShouldRetry:
    """Test retry eligibility."""

    @pytest.fixture
    def policy(self):
        return RetryPolicy()

    @pytest.mark.parametrize("label", [FailureLabel.CLIENT_ERROR, FailureLabel.MALFORMED])
    def test_non_retryable_labels_never_retry(self, policy, label):
        for attempt_index in range(10):
            assert policy.should_retry(label, attempt_index, max_retries=100) is False

    @pytest.mark.parametrize("label", [
        FailureLabel.TIMEOUT,
        FailureLabel.RATE_LIMITED,
        FailureLabel.SERVER_ERROR,
    ])
    def test_retryable_labels_retry_until_last_attempt(self, policy, label):
        assert policy.should_retry(label, 0, max_retries=3) is True
        assert policy.should_retry(label, 1, max_retries=3) is True
        assert policy.should_retry(label, 2, max_retries=3) is False
        assert policy.should_retry(label, 3, max_retries=3) is False

    def test_single_attempt_budget_never_retries(self, policy):
        assert policy.should_retry(FailureLabel.SERVER_ERROR, 0, max_retries=1) is False

    def test_retryable_property_matches_policy(self):
        assert FailureLabel.TIMEOUT.retryable
        assert FailureLabel.RATE_LIMITED.retryable
        assert FailureLabel.SERVER_ERROR.retryable
        assert not FailureLabel.CLIENT_ERROR.retryable
        assert not FailureLabel.MALFORMED.retryable


class TestBackoffDuration:
    """Test exponential backoff calculation."""

    def test_doubles_per_attempt(self):
        policy = RetryPolicy()

        assert policy.backoff_duration(0, 1.0) == 1.0
        assert policy.backoff_duration(1, 1.0) == 2.0
        assert policy.backoff_duration(2, 1.0) == 4.0

    @pytest.mark.parametrize("attempt_index", range(5))
    def test_matches_formula_below_cap(self, attempt_index):
        policy = RetryPolicy(max_interval=1000.0)

        assert policy.backoff_duration(attempt_index, 0.25) == 0.25 * 2 ** attempt_index

    def test_capped_at_max_interval(self):
        policy = RetryPolicy()

        assert policy.backoff_duration(10, 1.0) == DEFAULT_MAX_INTERVAL
        assert policy.backoff_duration(50, 1.0) == DEFAULT_MAX_INTERVAL

    def test_custom_cap(self):
        policy = RetryPolicy(max_interval=3.0)

        assert policy.backoff_duration(1, 1.0) == 2.0
        assert policy.backoff_duration(2, 1.0) == 3.0

    def test_jitter_stays_within_bounds(self):
        policy = RetryPolicy(max_interval=100.0, jitter=0.5)

        for _ in range(200):
            delay = policy.backoff_duration(2, 1.0)
            assert 2.0 <= delay <= 6.0

    def test_jitter_never_exceeds_cap(self):
        policy = RetryPolicy(max_interval=4.0, jitter=1.0)

        for _ in range(200):
            assert 0.0 <= policy.backoff_duration(5, 1.0) <= 4.0


class TestRetryPolicyValidation:
    def test_invalid_max_interval(self):
        with pytest.raises(ValueError, match="max_interval must be > 0"):
            RetryPolicy(max_interval=0)

    def test_invalid_jitter(self):
        with pytest.raises(ValueError, match="jitter must be within"):
            RetryPolicy(jitter=1.5)
