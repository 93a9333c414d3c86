"""
Gateway to the external chat-completion model.

Sends one non-streaming request per question using a caller-supplied
credential and returns the generated text. Every failure is raised as
a ModelGatewayError subclass so callers can fall back uniformly.
"""

import re
from collections.abc import Callable
from typing import Any

import httpx
from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    PermissionDeniedError,
)

from memora.config.config import Settings, get_settings
from memora.config.logging_config import get_logger

logger = get_logger(__name__)


SYSTEM_PROMPT = (
    "You are Memora, a helpful assistant specialising in Alzheimer's and memory care. "
    "You support family caregivers. Provide clear, concise and accurate information. "
    "Your responses should be supportive and practical, and you never present "
    "general information as a diagnosis or as a change to someone's treatment."
)


class ModelGatewayError(Exception):
    """Base class for model gateway failures."""


class AuthError(ModelGatewayError):
    """No credential configured, or the endpoint rejected it."""


class TransportError(ModelGatewayError):
    """Network or protocol failure talking to the endpoint."""


class MalformedResponseError(ModelGatewayError):
    """The endpoint answered without a usable completion."""


ClientFactory = Callable[[str], Any]


def clean_text_formatting(text: str) -> str:
    """Strip markdown emphasis and inline-code markers from model output."""
    text = re.sub(r"\*\*(.*?)\*\*", r"\1", text)
    text = re.sub(r"\*(.*?)\*", r"\1", text)
    text = re.sub(r"__(.*?)__", r"\1", text)
    text = re.sub(r"\b_(.*?)_\b", r"\1", text)
    text = re.sub(r"`(.*?)`", r"\1", text)
    return text.strip()


class ModelGateway:
    """
    Client boundary for the text-generation endpoint.

    The credential is passed on every call; the gateway never looks it
    up from ambient state. One client is kept for the configured key.
    Any other credential gets a client for that call only, closed once
    the call returns.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client_factory: ClientFactory | None = None,
    ):
        """
        Initialize the gateway.

        Args:
            settings: Application settings. Uses default if not provided.
            client_factory: Builds a client for a credential. Defaults to AsyncOpenAI.
        """
        self.settings = settings or get_settings()
        self._client_factory = client_factory or self._default_client
        self._client: Any | None = None

    def _default_client(self, credential: str) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=credential,
            base_url=self.settings.llm_base_url,
            timeout=self.settings.llm_timeout_seconds,
            max_retries=0,
        )

    @property
    def client(self) -> Any:
        """Lazily built client for the configured key."""
        if self._client is None:
            self._client = self._client_factory(self.settings.llm_api_key.strip())
        return self._client

    def _is_configured(self, credential: str) -> bool:
        return credential == self.settings.llm_api_key.strip()

    async def aclose(self) -> None:
        """Close the shared client, if one was built."""
        if self._client is not None:
            await self._client.close()
            self._client = None

    @staticmethod
    def has_access(credential: str | None) -> bool:
        """Whether a call is worth attempting with this credential."""
        return bool(credential and credential.strip())

    async def generate(
        self,
        prompt: str,
        credential: str | None,
        system_prompt: str = SYSTEM_PROMPT,
    ) -> str:
        """
        Generate a completion for an assembled prompt.

        Args:
            prompt: The composed prompt envelope.
            credential: API key for the endpoint.
            system_prompt: System instruction sent ahead of the prompt.

        Returns:
            The generated text, cleaned of markdown emphasis.

        Raises:
            AuthError: No credential, or it was rejected.
            TransportError: Connection, timeout or API status failure.
            MalformedResponseError: No usable completion in the payload.
        """
        if not self.has_access(credential):
            raise AuthError("No model credential configured")

        credential = credential.strip()
        if self._is_configured(credential):
            return await self._complete(self.client, prompt, system_prompt)

        client = self._client_factory(credential)
        try:
            return await self._complete(client, prompt, system_prompt)
        finally:
            await client.close()

    async def _complete(self, client: Any, prompt: str, system_prompt: str) -> str:
        try:
            response = await client.chat.completions.create(
                model=self.settings.llm_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.settings.llm_temperature,
                max_tokens=self.settings.llm_max_tokens,
            )
        except (AuthenticationError, PermissionDeniedError) as e:
            raise AuthError(str(e)) from e
        except (APITimeoutError, APIConnectionError) as e:
            raise TransportError(f"Could not reach model endpoint: {e}") from e
        except APIError as e:
            raise TransportError(f"Model endpoint error: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP failure: {e}") from e

        content = self._extract_content(response)
        logger.info(
            "Model completion received",
            model=self.settings.llm_model,
            response_length=len(content),
        )
        return clean_text_formatting(content)

    @staticmethod
    def _extract_content(response: Any) -> str:
        """Pull ``choices[0].message.content`` out of a completion."""
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError, TypeError) as e:
            raise MalformedResponseError("Completion payload has no choices[0].message.content") from e
        if not isinstance(content, str) or not content.strip():
            raise MalformedResponseError("Completion content is empty")
        return content
