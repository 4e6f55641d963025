"""Tests for RetryPolicy bookkeeping."""

from discord_guild_queue.domain.music.retry_policy import RetryPolicy

A = "https://www.youtube.com/watch?v=aaaaaaaaaaa"
B = "https://www.youtube.com/watch?v=bbbbbbbbbbb"


class TestRetryPolicy:
    def test_first_failure_is_retried(self):
        policy = RetryPolicy()
        assert policy.should_retry(A) is True
        assert policy.record_retry(A) == 1

    def test_same_track_is_not_retried_twice(self):
        """Should allow only one retry per track identity."""
        policy = RetryPolicy()
        policy.record_retry(A)

        assert policy.should_retry(A) is False

    def test_shared_counter_bounds_retries(self):
        """Should stop retrying once the guild-wide counter hits the limit."""
        policy = RetryPolicy(max_retries=1)
        policy.record_retry(A)

        assert policy.should_retry(B) is False

    def test_success_clears_identity(self):
        policy = RetryPolicy()
        policy.record_retry(A)

        policy.record_success(A)

        assert policy.is_clean
        assert policy.should_retry(A) is True

    def test_drop_clears_identity(self):
        policy = RetryPolicy()
        policy.record_retry(A)

        policy.record_drop(A)

        assert policy.is_clean

    def test_reset(self):
        policy = RetryPolicy()
        policy.record_retry(A)
        policy.record_retry(B)

        policy.reset()

        assert policy.count == 0
        assert policy.retried == set()

    def test_zero_retries_never_retries(self):
        assert RetryPolicy(max_retries=0).should_retry(A) is False
