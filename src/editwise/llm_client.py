"""LLM client for editwise: the advisory oracle.

The rest of the package only depends on the ``Oracle`` protocol, an object
with ``async generate(request) -> LLMResponse``. ``LLMClient`` implements it
against an OpenAI-compatible ``/v1/chat/completions`` endpoint; tests inject
deterministic stubs instead.

editwise/src/editwise/llm_client.py
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

import requests

from editwise.config import LLMConfig
from editwise.errors import OracleCancelledError, OracleFailureError, OracleUnavailableError

logger = logging.getLogger(__name__)

TOKEN_ESTIMATION_DIVISOR = 4

__all__ = [
    "Oracle",
    "LLMClient",
    "LLMRequest",
    "LLMResponse",
    "create_llm_client",
]


@dataclass
class LLMRequest:
    """Request details for one oracle call."""

    content: str
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    system_prompt: Optional[str] = None
    structured_output: Optional[Dict[str, Any]] = None  # JSON schema hint for the answer
    abort_signal: Optional[asyncio.Event] = None

    def messages(self) -> List[Dict[str, str]]:
        """Role-tagged content list sent to the oracle."""
        messages = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": self.content})
        return messages


@dataclass
class LLMResponse:
    """Typed response from the oracle."""

    content: str
    success: bool
    llm_used: str
    duration_seconds: float
    input_tokens: int
    error: Optional[str] = None


class Oracle(Protocol):
    """Anything that turns an LLMRequest into free text."""

    async def generate(self, request: LLMRequest) -> LLMResponse: ...


class LLMClient:
    """Oracle backed by an OpenAI-compatible chat completions API."""

    def __init__(self, config: LLMConfig, session: Optional[requests.Session] = None):
        self.config = config
        # Session for HTTP requests; timeout is set per-request
        self.session = session or requests.Session()

    def build_payload(self, request: LLMRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.config.model,
            "messages": request.messages(),
            "temperature": (
                request.temperature if request.temperature is not None else self.config.temperature
            ),
            "max_tokens": request.max_tokens or self.config.max_tokens,
            "stream": False,
        }
        if request.top_p is not None:
            payload["top_p"] = request.top_p

        if request.structured_output:
            if "json_schema" in request.structured_output:
                payload["response_format"] = {
                    "type": "json_schema",
                    "json_schema": request.structured_output["json_schema"],
                }
            else:
                payload["response_format"] = {"type": "json_object"}
        return payload

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Send request to the configured endpoint.

        Raises:
            OracleUnavailableError: No endpoint configured, or transport error.
            OracleFailureError: The endpoint answered without usable content.
            OracleCancelledError: request.abort_signal was set before the
                answer arrived.
        """
        if not self.config.is_configured:
            raise OracleUnavailableError(
                "No LLM configured. Set EDITWISE_LLM_API_URL or api_url in [tool.editwise.llm]"
            )

        abort_signal = request.abort_signal
        if abort_signal is not None and abort_signal.is_set():
            raise OracleCancelledError("Oracle call aborted before it started")

        start_time = time.time()
        call = asyncio.ensure_future(asyncio.to_thread(self._post, request))

        if abort_signal is None:
            data = await call
        else:
            waiter = asyncio.ensure_future(abort_signal.wait())
            done, _ = await asyncio.wait({call, waiter}, return_when=asyncio.FIRST_COMPLETED)
            if call not in done:
                # The worker thread finishes on its own, bounded by the HTTP timeout.
                call.cancel()
                raise OracleCancelledError("Oracle call aborted")
            waiter.cancel()
            data = call.result()

        content = self._extract_content(data)
        duration = time.time() - start_time
        logger.debug(f"Oracle answered {len(content)} chars in {duration:.2f}s")

        return LLMResponse(
            content=content,
            success=True,
            llm_used=self.config.model,
            duration_seconds=duration,
            input_tokens=len(request.content) // TOKEN_ESTIMATION_DIVISOR,
        )

    def _post(self, request: LLMRequest) -> Dict[str, Any]:
        url = f"{self.config.api_url.rstrip('/')}/v1/chat/completions"

        headers = {}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"

        payload = self.build_payload(request)
        logger.info(f"LLM Request: {self.config.model} at {url}")
        logger.debug(f"Max tokens: {payload['max_tokens']}, temperature: {payload['temperature']}")

        try:
            response = self.session.post(
                url, json=payload, headers=headers, timeout=self.config.timeout_seconds
            )
            logger.debug(f"HTTP response status: {response.status_code}")
            response.raise_for_status()
            return response.json()
        except requests.Timeout as e:
            raise OracleUnavailableError(
                f"LLM request timed out after {self.config.timeout_seconds}s"
            ) from e
        except requests.RequestException as e:
            raise OracleUnavailableError(f"LLM request failed: {e}") from e
        except ValueError as e:
            raise OracleFailureError(f"LLM response is not JSON: {e}") from e

    @staticmethod
    def _extract_content(data: Any) -> str:
        if not isinstance(data, dict) or not data.get("choices"):
            keys = list(data.keys()) if isinstance(data, dict) else type(data).__name__
            logger.error(f"Invalid LLM response format. Response keys: {keys}")
            raise OracleFailureError("Invalid LLM response format")

        message = data["choices"][0].get("message") or {}
        content = message.get("content") or ""
        if not content.strip():
            raise OracleFailureError("AI did not return any analysis content")
        return content


def create_llm_client(config: Optional[LLMConfig] = None) -> LLMClient:
    """Create the default oracle from configuration.

    Always returns a client, even if no endpoint is configured; calls then
    fail with OracleUnavailableError and the callers degrade.
    """
    if config is None:
        from editwise.config import get_llm_config

        config = get_llm_config()
    return LLMClient(config)
