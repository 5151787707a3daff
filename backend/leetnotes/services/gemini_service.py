"""
LeetNotes Backend — Google Gemini Service Implementation
==========================================================

What:  Text generation for study notes through the Gemini API.
How:   google-generativeai SDK `generate_content_async` with a per-request
       timeout, guarded by a circuit breaker. The SDK response is reduced to
       a validated GeminiAnswer before any field is used.
Who:   Instantiated once at import; called by NoteService.generate_note().

Failure mapping:
    missing GEMINI_API_KEY                     → ConfigurationError (500)
    transport error / timeout / non-2xx        → LLMServiceError    (502)
    prompt or candidate blocked for SAFETY     → LLMServiceError    (502)
    no candidates / no text in first part      → LLMResponseError   (500)
    breaker open                               → CircuitBreakerOpenError (503)

Retries:
    GEMINI_MAX_ATTEMPTS defaults to 1, so a failed call fails the request.
    Raising it enables tenacity retries with exponential backoff + jitter,
    limited to transient upstream errors.
"""

import enum
import logging
import time
import uuid
from typing import Any, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from pydantic import BaseModel, Field
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from leetnotes.config import settings
from leetnotes.exceptions import (
    CircuitBreakerOpenError,
    ConfigurationError,
    LLMResponseError,
    LLMServiceError,
)
from leetnotes.services.llm_base import LLMService

logger = logging.getLogger(__name__)

# Upstream errors worth another attempt when retries are enabled
TRANSIENT_ERRORS = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.InternalServerError,
    google_exceptions.TooManyRequests,
    ConnectionError,
    TimeoutError,
)

_UNSPECIFIED = {"", "FINISH_REASON_UNSPECIFIED", "BLOCK_REASON_UNSPECIFIED"}
SAFETY_DETAILS = "Content blocked by safety filters."


# ══════════════════════════════════════════════════════════════════════════
# Circuit Breaker
# ══════════════════════════════════════════════════════════════════════════

class CircuitBreaker:
    """
    Consecutive-failure circuit breaker.

    State Machine:
        CLOSED     → failures counted; at `failure_threshold` → OPEN
        OPEN       → every call rejected with CircuitBreakerOpenError until
                     `recovery_timeout` seconds pass → HALF_OPEN
        HALF_OPEN  → one trial call; success → CLOSED, failure → OPEN

    Plain counters are enough: uvicorn runs each worker's requests on one
    event loop thread.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None

    def can_execute(self) -> bool:
        """Return True if a call may proceed; raise CircuitBreakerOpenError otherwise."""
        if self.state != self.OPEN:
            return True

        elapsed = time.time() - (self.last_failure_time or 0)
        if elapsed >= self.recovery_timeout:
            logger.info("Gemini circuit breaker HALF_OPEN after %.1fs", elapsed)
            self.state = self.HALF_OPEN
            return True
        raise CircuitBreakerOpenError(recovery_time=max(1, int(self.recovery_timeout - elapsed)))

    def record_success(self) -> None:
        if self.state == self.HALF_OPEN:
            logger.info("Gemini circuit breaker CLOSED (service recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.time()

        if self.state == self.HALF_OPEN:
            logger.warning("Gemini circuit breaker back to OPEN (trial call failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning(
                "Gemini circuit breaker OPEN after %d consecutive failures",
                self.failure_count,
            )
            self.state = self.OPEN


# ══════════════════════════════════════════════════════════════════════════
# Response Boundary
# ══════════════════════════════════════════════════════════════════════════

class GeminiAnswer(BaseModel):
    """The only parts of a Gemini response the service relies on."""
    text: str = Field(min_length=1)
    finish_reason: str = ""


def _enum_name(value: Any) -> str:
    """Name of an SDK enum value ("STOP", "SAFETY", ...); "" for None."""
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        return value.name
    return str(value)


def parse_gemini_response(response: Any) -> GeminiAnswer:
    """
    Validate a generate_content response and pull out the first candidate's text.

    Raises:
        LLMServiceError: Prompt or candidate blocked for safety.
        LLMResponseError: No candidates, or the first part has no text.
    """
    feedback = getattr(response, "prompt_feedback", None)
    block_reason = _enum_name(getattr(feedback, "block_reason", None))
    if block_reason not in _UNSPECIFIED:
        logger.error("Gemini prompt blocked: block_reason=%s", block_reason)
        raise LLMServiceError(message="AI generation failed", details=SAFETY_DETAILS)

    candidates = list(getattr(response, "candidates", None) or [])
    if not candidates:
        raise LLMResponseError(details="No valid candidates found in Gemini response.")

    candidate = candidates[0]
    finish_reason = _enum_name(getattr(candidate, "finish_reason", None))
    if finish_reason not in _UNSPECIFIED and finish_reason != "STOP":
        logger.warning("Gemini generation finished with reason: %s", finish_reason)
        if finish_reason == "SAFETY":
            raise LLMServiceError(message="AI generation failed", details=SAFETY_DETAILS)

    content = getattr(candidate, "content", None)
    parts = list(getattr(content, "parts", None) or [])
    text = getattr(parts[0], "text", None) if parts else None
    if not isinstance(text, str) or not text:
        raise LLMResponseError(details="Missing 'text' in Gemini response parts structure.")

    return GeminiAnswer(text=text, finish_reason=finish_reason)


# ══════════════════════════════════════════════════════════════════════════
# Gemini Service
# ══════════════════════════════════════════════════════════════════════════

class GeminiService(LLMService):
    """
    Gemini-backed LLMService.

    Error Handling Chain:
        breaker check → SDK call (optionally retried) → on exception: record
        failure, raise LLMServiceError → on response: record success, then
        validate the response shape.
    """

    def __init__(self):
        self._configured_key: Optional[str] = None
        self._configure_sdk()
        self.model = genai.GenerativeModel(settings.gemini_model)
        self.circuit_breaker = CircuitBreaker(
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
        )
        logger.info(
            "GeminiService initialized with model=%s, timeout=%ds, max_attempts=%d",
            settings.gemini_model,
            settings.gemini_timeout,
            settings.gemini_max_attempts,
        )

    def _configure_sdk(self) -> None:
        # genai keeps the key in module-level state
        if settings.gemini_api_key and settings.gemini_api_key != self._configured_key:
            genai.configure(api_key=settings.gemini_api_key)
            self._configured_key = settings.gemini_api_key

    def is_configured(self) -> bool:
        return bool(settings.gemini_api_key)

    async def generate_text(self, prompt: str) -> str:
        if not self.is_configured():
            logger.error("GEMINI_API_KEY is not set on the server")
            raise ConfigurationError(details="Missing API key.")
        self._configure_sdk()

        request_id = str(uuid.uuid4())[:8]
        self.circuit_breaker.can_execute()

        logger.info("[%s] Calling Gemini model=%s (%d prompt chars)", request_id, settings.gemini_model, len(prompt))

        try:
            response = await self._call_gemini_with_retry(prompt, request_id)
        except Exception as e:
            self.circuit_breaker.record_failure()
            status = getattr(e, "code", None)
            logger.error(
                "[%s] Gemini API request failed: %s: %s",
                request_id,
                type(e).__name__,
                str(e),
            )
            raise LLMServiceError(
                details=f"Status {int(status)}" if isinstance(status, int) else (str(e) or type(e).__name__),
                context={"request_id": request_id, "error_type": type(e).__name__},
            )

        self.circuit_breaker.record_success()
        answer = parse_gemini_response(response)
        logger.info(
            "[%s] Gemini answer extracted: %d chars, finish_reason=%s",
            request_id,
            len(answer.text),
            answer.finish_reason or "-",
        )
        return answer.text

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(settings.gemini_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _call_gemini_with_retry(self, prompt: str, request_id: str) -> Any:
        """One SDK call; the decorator retries only TRANSIENT_ERRORS."""
        start_time = time.time()
        response = await self.model.generate_content_async(
            prompt,
            request_options={"timeout": settings.gemini_timeout},
        )
        logger.debug(
            "[%s] Gemini responded in %.0fms",
            request_id,
            (time.time() - start_time) * 1000,
        )
        return response


gemini_service = GeminiService()
