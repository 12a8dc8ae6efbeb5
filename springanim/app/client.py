"""
SPRINGANIM - ASYNC API CLIENT
=============================

Non-blocking HTTP client for the springanim API, for presentation layers
written in Python (headless renderers, notebooks, other services).

Features:
- Async I/O (httpx)
- Connection pooling
- Timeout handling
- Retry on network errors (not on 4xx)
"""
from __future__ import annotations

import asyncio
import json
import httpx
from typing import List, Dict, Any, Optional, AsyncIterator
from contextlib import asynccontextmanager


class SpringAnimAPIError(RuntimeError):
    """Raised when the API answers with an error or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SpringAnimClient:
    """
    Async client for the springanim API.

    Usage:
        async with SpringAnimClient("http://localhost:8000").session() as client:
            plan = await client.animation(x=100, preset="wobbly")
            print(plan["css"])
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize client.

        Args:
            base_url: API server URL
            timeout: Request timeout (seconds)
            max_retries: Attempts per request on network errors
            backoff: First retry delay (doubles every attempt)
            transport: Custom httpx transport (tests, ASGI in-process)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff
        self.transport = transport

        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        """Create the pooled HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            limits=httpx.Limits(
                max_keepalive_connections=10,
                max_connections=20,
                keepalive_expiry=30.0
            ),
            transport=self.transport
        )

    async def close(self) -> None:
        """Close HTTP client and release connections."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @asynccontextmanager
    async def session(self):
        """
        Context manager for client lifecycle.

        Usage:
            async with client.session():
                samples = await client.sample(x=10, stiffness=1, damping=0.1)
        """
        await self.initialize()
        try:
            yield self
        finally:
            await self.close()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        if not self._client:
            await self.initialize()

        last_error = None
        for attempt in range(self.max_retries):
            try:
                response = await self._client.request(method, path, **kwargs)
                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                detail = e.response.text
                try:
                    body = e.response.json()
                    detail = body.get("detail") or body.get("message") or detail
                except ValueError:
                    pass
                # Server answered; retrying will not change the answer
                raise SpringAnimAPIError(
                    f"HTTP {e.response.status_code}: {detail}",
                    status_code=e.response.status_code
                ) from e

            except httpx.RequestError as e:
                last_error = f"Network error: {e}"

            if attempt < self.max_retries - 1:
                await asyncio.sleep(self.backoff * (2 ** attempt))

        raise SpringAnimAPIError(
            f"springanim request failed after {self.max_retries} attempts: {last_error}"
        )

    # ========================================================================
    # ENDPOINTS
    # ========================================================================

    async def health_check(self) -> Dict[str, Any]:
        """
        Check if the API is reachable.

        Returns:
            Dict with keys: connected (bool), plus server health or error
        """
        try:
            health = await self._request("GET", "/health")
            return {"connected": True, **health}
        except SpringAnimAPIError as e:
            return {"connected": False, "error": str(e)}

    async def sample(self, x: float = 0.0, velocity: float = 0.0, **spring: Any) -> List[float]:
        """
        Sample a spring.

        Args:
            x: Initial displacement
            velocity: Initial velocity
            **spring: preset, stiffness, damping, mass, max_steps

        Returns:
            Displacements, one per frame
        """
        payload = {"x": x, "velocity": velocity, **spring}
        data = await self._request("POST", "/springs/sample", json=payload)
        return data["samples"]

    async def animation(
        self,
        x: float,
        velocity: float = 0.0,
        mapper: Optional[Dict[str, Any]] = None,
        prefixes: Optional[List[str]] = None,
        **spring: Any
    ) -> Dict[str, Any]:
        """
        Build a CSS animation.

        Returns:
            AnimationPlan dict (name, css, duration_ms, remove_after_ms, ...)
        """
        payload: Dict[str, Any] = {"x": x, "velocity": velocity, **spring}
        if mapper is not None:
            payload["mapper"] = mapper
        if prefixes is not None:
            payload["prefixes"] = prefixes
        return await self._request("POST", "/springs/animation", json=payload)

    async def live(self, x: float, velocity: float = 0.0, **spring: Any) -> AsyncIterator[float]:
        """
        Stream displacements frame by frame until the spring rests.

        Usage:
            async for x in client.live(100, preset="wobbly"):
                render(x)
        """
        if not self._client:
            await self.initialize()

        payload = {"x": x, "velocity": velocity, **spring}
        async with self._client.stream("POST", "/springs/live", json=payload) as response:
            if response.status_code >= 400:
                await response.aread()
                raise SpringAnimAPIError(
                    f"HTTP {response.status_code}: {response.text}",
                    status_code=response.status_code
                )

            async for line in response.aiter_lines():
                if not line:
                    continue
                frame = json.loads(line)
                if frame.get("resting"):
                    return
                yield frame["x"]

    async def list_presets(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/presets")
        return data["presets"]

    async def get_preset(self, name: str, include_preview: bool = False) -> Dict[str, Any]:
        params = {"include_preview": "true"} if include_preview else None
        return await self._request("GET", f"/presets/{name}", params=params)
