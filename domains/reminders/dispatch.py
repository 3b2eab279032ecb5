"""Forward due reminders to the agent API."""

from typing import Optional

import httpx

from config import AGENT_API_URL, AGENT_API_KEY, REMINDERS_HTTP_TIMEOUT
from logger import logger
from .errors import ConfigurationError, DispatchError


class DispatchClient:
    """Sends a whole batch of due reminders in a single call."""

    def __init__(self, base_url: Optional[str], api_key: Optional[str], timeout: float = REMINDERS_HTTP_TIMEOUT):
        if not base_url:
            raise ConfigurationError("AGENT_API_URL is not configured")
        if not api_key:
            raise ConfigurationError("AGENT_API_KEY is not configured")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_config(cls) -> "DispatchClient":
        return cls(AGENT_API_URL, AGENT_API_KEY)

    async def send(self, batch: list[dict]) -> None:
        """POST the batch to /reminders.

        Raises:
            DispatchError: transport failure or non-2xx response
        """
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    f"{self.base_url}/reminders",
                    headers={"x-api-key": self.api_key},
                    json=batch,
                    timeout=self.timeout
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DispatchError(
                f"Agent API rejected {len(batch)} reminders - "
                f"Status: {e.response.status_code}, Body: {e.response.text[:200]}",
                status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise DispatchError(f"Failed to reach agent API: {e!r}") from e

    async def dispatch(self, batch: list[dict]) -> bool:
        """Best-effort send: failures are logged, never raised, never retried.

        Returns:
            True if the agent API acknowledged the batch
        """
        if not batch:
            return True

        try:
            await self.send(batch)
        except DispatchError as e:
            if e.rejected:
                logger.error(f"Agent API refused {len(batch)} reminders (HTTP {e.status_code}): {e}")
            else:
                logger.error(f"Agent API unreachable, {len(batch)} reminders not sent: {e}")
            return False

        logger.info(f"Dispatched {len(batch)} reminders to agent API")
        return True
