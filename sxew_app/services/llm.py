import os
import time
import logging
from typing import TypedDict, Optional

from openai import OpenAI
from databricks.sdk.core import Config, oauth_service_principal

logger = logging.getLogger(__name__)

ALL_PROVIDERS: list[str] = [
    "databricks-gpt-5-2",
    "databricks-claude-sonnet-4-5",
    "databricks-gemini-3-pro",
]

PROVIDER_LABELS: dict[str, str] = {
    "databricks-gpt-5-2": "GPT-5 (Databricks)",
    "databricks-claude-sonnet-4-5": "Claude Sonnet 4.5 (Databricks)",
    "databricks-gemini-3-pro": "Gemini 3 Pro (Databricks)",
}


class LLMMessage(TypedDict):
    role: str
    content: str


class LLMCompletionResult(TypedDict):
    content: str
    provider: str
    prompt_tokens: Optional[int]
    completion_tokens: Optional[int]


_token_cache: dict[str, object] = {
    "token": None,
    "expires_at": 0.0,
}

_TOKEN_TTL_SECONDS = 3000


def get_default_model() -> str:
    model = os.environ.get("SXEW_DEFAULT_MODEL", "")
    return model if model in ALL_PROVIDERS else ALL_PROVIDERS[0]


def _get_host() -> str:
    host = os.environ.get("DATABRICKS_HOST", "")
    if not host:
        raise RuntimeError("Databricks host not configured. Set DATABRICKS_HOST.")
    return host if host.startswith("https://") else f"https://{host}"


def _get_databricks_config() -> Config:
    client_id = os.environ.get("DATABRICKS_CLIENT_ID", "")
    client_secret = os.environ.get("DATABRICKS_CLIENT_SECRET", "")

    if not client_id or not client_secret:
        raise RuntimeError(
            "Databricks credentials not configured. "
            "Set DATABRICKS_HOST, DATABRICKS_CLIENT_ID, and DATABRICKS_CLIENT_SECRET."
        )

    return Config(host=_get_host(), client_id=client_id, client_secret=client_secret)


def _get_access_token() -> str:
    now = time.time()
    cached_token = _token_cache.get("token")
    expires_at = _token_cache.get("expires_at", 0.0)

    if cached_token and isinstance(expires_at, (int, float)) and now < expires_at:
        return str(cached_token)

    logger.info("Refreshing Databricks OAuth token")
    header_factory = oauth_service_principal(_get_databricks_config())
    token = header_factory().get("Authorization", "").replace("Bearer ", "")

    if not token:
        raise RuntimeError("Failed to obtain Databricks OAuth token")

    _token_cache["token"] = token
    _token_cache["expires_at"] = now + _TOKEN_TTL_SECONDS
    return token


def _create_openai_client() -> OpenAI:
    return OpenAI(
        api_key=_get_access_token(),
        base_url=f"{_get_host()}/serving-endpoints",
    )


def get_available_providers() -> list[str]:
    return list(ALL_PROVIDERS)


def is_provider_available(provider: str) -> bool:
    return provider in ALL_PROVIDERS


def llm_complete(
    model: str,
    messages: list[LLMMessage],
    max_tokens: int = 2048,
) -> LLMCompletionResult:
    if not is_provider_available(model):
        logger.warning("LLM: %s not available, falling back to %s", model, get_default_model())
        model = get_default_model()

    providers_to_try = [model] + [p for p in ALL_PROVIDERS if p != model]
    last_error: Optional[Exception] = None

    for attempt_model in providers_to_try:
        try:
            return _call_model(attempt_model, messages, max_tokens)
        except Exception as e:
            last_error = e
            logger.error("LLM error with %s: %s", attempt_model, str(e))

    raise RuntimeError(f"All LLM providers failed. Last error: {last_error}")


def _call_model(model: str, messages: list[LLMMessage], max_tokens: int) -> LLMCompletionResult:
    logger.info("LLM: Calling Databricks model=%s max_tokens=%d", model, max_tokens)

    response = _create_openai_client().chat.completions.create(
        model=model,
        messages=list(messages),
        max_tokens=max_tokens,
    )

    prompt_tokens = response.usage.prompt_tokens if response.usage else None
    completion_tokens = response.usage.completion_tokens if response.usage else None
    logger.info(
        "LLM: Response from %s - prompt_tokens=%s completion_tokens=%s",
        model, prompt_tokens, completion_tokens,
    )

    return LLMCompletionResult(
        content=response.choices[0].message.content or "",
        provider=model,
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
    )
