"""
Rate Limiting Middleware
Sliding-window request limits per client, tighter on sign-in and sign-up
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from collections import defaultdict, deque
from typing import Deque, Dict, NamedTuple, Optional
import threading
import logging
import math
import time

from accounts_api.core.config import settings

logger = logging.getLogger(__name__)


class Rule(NamedTuple):
    name: str
    limit: int
    window: int


class Decision(NamedTuple):
    allowed: bool
    limit: int
    remaining: int
    reset: int


# (method, path) -> rule; everything else under /api/ uses the default rule
ROUTE_RULES = {
    ('POST', '/api/auth/login'): Rule('login', 5, 15 * 60),
    ('POST', '/api/auth/signup'): Rule('signup', 3, 60 * 60),
    ('POST', '/api/auth/register'): Rule('signup', 3, 60 * 60),
}

EXEMPT_PATHS = {'/api/health'}


def client_address(request: Request) -> str:
    """First hop of X-Forwarded-For, then X-Real-IP, then the socket peer"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


class RateLimiter:
    """
    Thread-safe in-memory sliding window limiter.

    Each (rule, client) pair keeps a deque of monotonic timestamps; entries
    older than the rule's window are dropped before counting.
    """

    def __init__(self, max_requests: int = None, window_seconds: int = None, rules: Dict = None):
        if max_requests is None:
            max_requests = settings.RATE_LIMIT_MAX_REQUESTS
        if window_seconds is None:
            window_seconds = max(1, settings.RATE_LIMIT_WINDOW_MS // 1000)

        self.default_rule = Rule('api', max_requests, window_seconds)
        self.rules = ROUTE_RULES if rules is None else rules
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def rule_for(self, method: str, path: str) -> Rule:
        return self.rules.get((method, path.rstrip('/') or '/'), self.default_rule)

    def reset(self):
        with self._lock:
            self._hits.clear()

    def hit(self, rule: Rule, client: str, now: Optional[float] = None) -> Decision:
        """Record one request for ``client`` under ``rule`` unless it is over the limit"""
        now = time.monotonic() if now is None else now
        key = f"{rule.name}:{client}"

        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= now - rule.window:
                hits.popleft()

            if len(hits) >= rule.limit:
                wait = max(1, math.ceil(hits[0] + rule.window - now))
                logger.warning(f"Rate limit exceeded for {key}: {len(hits)}/{rule.limit} in {rule.window}s")
                return Decision(False, rule.limit, 0, wait)

            hits.append(now)
            return Decision(True, rule.limit, rule.limit - len(hits), rule.window)

    def check(self, request: Request) -> Decision:
        rule = self.rule_for(request.method, request.url.path)
        return self.hit(rule, client_address(request))


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, rate_limiter: RateLimiter = None):
        super().__init__(app)
        self.rate_limiter = rate_limiter or default_rate_limiter

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not settings.RATE_LIMIT_ENABLED or not path.startswith('/api/') or path in EXEMPT_PATHS:
            return await call_next(request)

        decision = self.rate_limiter.check(request)
        headers = {
            'X-RateLimit-Limit': str(decision.limit),
            'X-RateLimit-Remaining': str(decision.remaining),
            'X-RateLimit-Reset': str(decision.reset),
        }

        if not decision.allowed:
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    'success': False,
                    'message': 'Too many requests. Please try again later.',
                    'retry_after': decision.reset
                },
                headers={'Retry-After': str(decision.reset), **headers}
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response


default_rate_limiter = RateLimiter()
