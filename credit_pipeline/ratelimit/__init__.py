"""Rate limiter module. Public API: TokenBucket, RateBucket, RateLimitSettings."""
from credit_pipeline.ratelimit.bucket import RateBucket, TokenBucket
from credit_pipeline.ratelimit.settings import RateLimitSettings

__all__ = ["TokenBucket", "RateBucket", "RateLimitSettings"]
