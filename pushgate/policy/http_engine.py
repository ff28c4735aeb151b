"""Policy engine client — posts the ``Operation`` to an HTTP endpoint.

The endpoint receives the operation as JSON and answers with::

    {"allowed": true|false, "errors": ["...", ...]}
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from pushgate.gate.errors import BackendUnavailableError
from pushgate.gate.models import AccessDecision, Operation

logger = logging.getLogger(__name__)


class HttpPolicyEngine:
    """Implements the ``PolicyEngine`` protocol over HTTP.

    An unreachable, slow or malformed endpoint is a ``BackendUnavailableError``:
    the push is refused, never silently allowed.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = url
        self._client = client or httpx.Client(timeout=timeout)

    def check_access(self, operation: Operation) -> AccessDecision:
        payload = operation.model_dump(mode="json")
        try:
            response = self._client.post(self._url, json=payload)
            response.raise_for_status()
            decision = AccessDecision.model_validate(response.json())
        except httpx.TimeoutException as exc:
            raise BackendUnavailableError(f"Policy engine timed out: {self._url}") from exc
        except httpx.HTTPError as exc:
            raise BackendUnavailableError(f"Policy engine request failed: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            raise BackendUnavailableError(f"Policy engine returned an invalid answer: {exc}") from exc

        logger.debug(
            "policy engine answered allowed=%s with %d error(s)",
            decision.allowed, len(decision.errors),
        )
        return decision

    def close(self) -> None:
        self._client.close()
