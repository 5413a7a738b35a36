"""
Rate limiting for the generation endpoint
"""
import time
from collections import defaultdict
from fastapi import Request, HTTPException
from typing import Callable, Dict, List
import logging

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    In-memory sliding-window rate limiter, used as a route dependency

    Each generation request costs one model call, so only that route is limited.
    Production with several workers: move the windows to Redis.
    """

    def __init__(
        self,
        requests_per_minute: int = 10,
        requests_per_hour: int = 100,
        clock: Callable[[], float] = time.time
    ):
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour
        self.clock = clock

        # {client_id: [timestamps]}
        self.minute_tracker: Dict[str, List[float]] = defaultdict(list)
        self.hour_tracker: Dict[str, List[float]] = defaultdict(list)

    def _get_client_id(self, request: Request) -> str:
        """
        Client IP as seen on the socket

        Forwarded headers are trusted only through uvicorn's --proxy-headers
        and forwarded_allow_ips, which rewrite request.client.
        """
        return request.client.host if request.client else "unknown"

    def _prune(self, tracker: Dict[str, List[float]], window_seconds: int, now: float):
        cutoff_time = now - window_seconds

        for client_id in list(tracker.keys()):
            tracker[client_id] = [ts for ts in tracker[client_id] if ts > cutoff_time]
            if not tracker[client_id]:
                del tracker[client_id]

    def check(self, client_id: str) -> None:
        """
        Record a request for client_id

        Raises:
            HTTPException: 429 if a window is full
        """
        now = self.clock()

        self._prune(self.minute_tracker, 60, now)
        self._prune(self.hour_tracker, 3600, now)

        minute_requests = len(self.minute_tracker.get(client_id, []))
        if minute_requests >= self.requests_per_minute:
            logger.warning(f"Rate limit exceeded (minute): {client_id}")
            raise HTTPException(
                status_code=429,
                detail={
                    "error": "rate_limit_exceeded",
                    "message": f"Too many requests. Limit: {self.requests_per_minute} requests per minute",
                    "retry_after": 60
                },
                headers={"Retry-After": "60"}
            )

        hour_requests = len(self.hour_tracker.get(client_id, []))
        if hour_requests >= self.requests_per_hour:
            logger.warning(f"Rate limit exceeded (hour): {client_id}")
            raise HTTPException(
                status_code=429,
                detail={
                    "error": "rate_limit_exceeded",
                    "message": f"Too many requests. Limit: {self.requests_per_hour} requests per hour",
                    "retry_after": 3600
                },
                headers={"Retry-After": "3600"}
            )

        self.minute_tracker[client_id].append(now)
        self.hour_tracker[client_id].append(now)

        logger.debug(f"Rate limit check passed: {client_id} (minute: {minute_requests+1}, hour: {hour_requests+1})")

    async def __call__(self, request: Request) -> None:
        self.check(self._get_client_id(request))
