"""Gemini generateContent client with endpoint fallback and retry."""

import asyncio
import logging

import httpx

from skylar.config.schema import GEMINI_FALLBACK_URL, GEMINI_PRIMARY_URL
from skylar.errors import AiGenerationError

logger = logging.getLogger(__name__)

SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_DANGEROUS_CONTENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_HARASSMENT",
    )
]


def mask_key(key: str) -> str:
    if len(key) <= 8:
        return "***"
    return f"{key[:4]}...{key[-4:]}"


def extract_text(data: dict) -> str:
    """First candidate's first text part, stripped. Empty if absent."""
    try:
        return str(data["candidates"][0]["content"]["parts"][0]["text"]).strip()
    except (KeyError, IndexError, TypeError):
        return ""


class GeminiClient:
    def __init__(
        self,
        api_key: str,
        primary_url: str = GEMINI_PRIMARY_URL,
        fallback_url: str = GEMINI_FALLBACK_URL,
        timeout: float = 10.0,
        max_retries: int = 2,
        retry_base_delay: float = 1.0,
        http: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.primary_url = primary_url
        self.fallback_url = fallback_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self._http = http or httpx.AsyncClient(timeout=timeout)

    @property
    def configured(self) -> bool:
        return bool(self.api_key) and "YOUR_API_KEY" not in self.api_key

    async def aclose(self) -> None:
        await self._http.aclose()

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_output_tokens: int = 100,
        top_p: float = 0.8,
        top_k: int = 40,
        timeout: float | None = None,
        max_retries: int | None = None,
        safety: bool = True,
    ) -> str:
        """Generate text for a prompt.

        A 404 on the primary endpoint switches to the fallback endpoint
        without using up a retry. 5xx, timeouts and transport errors are
        retried with exponential backoff. 401/403 fail immediately.
        """
        if not self.configured:
            raise AiGenerationError("Gemini API key is missing", reason="missing_key")

        body: dict = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_output_tokens,
                "topP": top_p,
                "topK": top_k,
            },
        }
        if safety:
            body["safetySettings"] = SAFETY_SETTINGS

        retries_allowed = self.max_retries if max_retries is None else max_retries
        request_timeout = self.timeout if timeout is None else timeout
        url = self.primary_url
        retries = 0

        while True:
            logger.debug(
                "Calling %s (attempt %d/%d, key %s)",
                url, retries + 1, retries_allowed + 1, mask_key(self.api_key),
            )
            try:
                resp = await self._http.post(
                    url,
                    params={"key": self.api_key},
                    json=body,
                    timeout=request_timeout,
                )
            except httpx.TimeoutException as e:
                if retries < retries_allowed:
                    retries += 1
                    logger.warning("Gemini request timed out, retrying (%d/%d)", retries, retries_allowed)
                    continue
                raise AiGenerationError("Gemini request timed out", reason="timeout") from e
            except httpx.RequestError as e:
                if retries < retries_allowed:
                    retries += 1
                    delay = self.retry_base_delay * (2**retries)
                    logger.warning("Gemini network error, retrying in %.1fs: %s", delay, e)
                    await asyncio.sleep(delay)
                    continue
                raise AiGenerationError(f"Gemini request failed: {e}", reason="network") from e

            status = resp.status_code
            if status in (401, 403):
                raise AiGenerationError(
                    f"Gemini rejected credentials (HTTP {status})", reason="auth"
                )
            if status == 404 and url == self.primary_url and self.fallback_url not in ("", url):
                logger.info("Primary Gemini endpoint not found, switching to fallback")
                url = self.fallback_url
                continue
            if status >= 500 and retries < retries_allowed:
                retries += 1
                delay = self.retry_base_delay * (2**retries)
                logger.warning("Gemini returned %d, retrying in %.1fs", status, delay)
                await asyncio.sleep(delay)
                continue
            if status != 200:
                logger.error("Gemini request failed with %d: %s", status, resp.text[:200])
                raise AiGenerationError(
                    f"Gemini request failed with status {status}",
                    reason="server" if status >= 500 else "http",
                )

            try:
                data = resp.json()
            except ValueError as e:
                raise AiGenerationError("Gemini returned invalid JSON", reason="empty") from e
            text = extract_text(data)
            if not text:
                logger.error("Unexpected Gemini response structure: %s", str(data)[:200])
                raise AiGenerationError("Gemini returned no text", reason="empty")
            return text
