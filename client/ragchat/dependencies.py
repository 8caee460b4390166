"""Factories that build the store and response provider from settings.

Nothing here is cached: every call returns a fresh instance so several
clients (or tests) can run side by side with their own dependencies.
"""

import logging
from pathlib import Path

import yaml
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from ragchat.config import Settings
from ragchat.providers.base import ResponseProvider
from ragchat.providers.remote import DEFAULT_SYSTEM_PROMPT, RemoteResponseProvider
from ragchat.providers.simulated import SimulatedResponseProvider
from ragchat.store.base import RemoteStore
from ragchat.store.http_store import HttpRemoteStore
from ragchat.store.memory_store import InMemoryRemoteStore

logger = logging.getLogger(__name__)


def build_remote_store(settings: Settings) -> RemoteStore:
    """Return the remote store selected by ``settings.remote_store``."""
    if settings.remote_store == "memory":
        logger.info("Using in-memory remote store")
        return InMemoryRemoteStore()
    return HttpRemoteStore(
        settings.storage_api_url,
        settings.storage_api_key,
        timeout=settings.storage_timeout,
    )


def load_system_prompt(path: Path | None = None) -> str:
    """Read the assistant's system prompt from a persona YAML file.

    Args:
        path: Persona file with a ``system_prompt`` key. Uses the built-in
              prompt if None.

    Returns:
        The configured prompt, or the built-in one when the key is empty.

    Raises:
        FileNotFoundError: If the persona file does not exist.
        yaml.YAMLError: If the file is not a YAML mapping.
    """
    if path is None:
        return DEFAULT_SYSTEM_PROMPT
    if not path.exists():
        raise FileNotFoundError(f"Persona file not found: {path}")

    with open(path, encoding="utf-8") as f:
        persona = yaml.safe_load(f) or {}

    if not isinstance(persona, dict):
        raise yaml.YAMLError(f"Persona file must contain a mapping: {path}")
    prompt = str(persona.get("system_prompt") or "").strip()
    return prompt or DEFAULT_SYSTEM_PROMPT


def _build_chat_model(settings: Settings) -> tuple[BaseChatModel, str, str]:
    """Return (model, model name, provider name) for a remote provider."""
    name = settings.response_provider

    if name == "openai":
        if not settings.openai_api_key:
            raise RuntimeError("Missing OPENAI_API_KEY for the openai provider")
        model = ChatOpenAI(
            model=settings.openai_model,
            api_key=settings.openai_api_key,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        )
        return model, settings.openai_model, "OpenAI"

    if name == "gemini":
        if not settings.google_api_key:
            raise RuntimeError("Missing GOOGLE_API_KEY for the gemini provider")
        model = ChatGoogleGenerativeAI(
            model=settings.gemini_model,
            google_api_key=settings.google_api_key,
            temperature=settings.llm_temperature,
            max_output_tokens=settings.llm_max_tokens,
        )
        return model, settings.gemini_model, "Gemini"

    if not settings.groq_api_key:
        raise RuntimeError("Missing GROQ_API_KEY for the groq provider")
    model = ChatOpenAI(
        model=settings.groq_model,
        api_key=settings.groq_api_key,
        base_url=settings.groq_base_url,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )
    return model, settings.groq_model, "Groq"


def build_response_provider(settings: Settings) -> ResponseProvider:
    """Return the response provider selected by ``settings.response_provider``.

    Raises:
        RuntimeError: If a remote provider is selected without its API key.
    """
    if settings.response_provider == "simulated":
        return SimulatedResponseProvider(
            latency_min=settings.simulated_latency_min,
            latency_max=settings.simulated_latency_max,
        )

    model, model_name, provider_name = _build_chat_model(settings)
    logger.info("Using %s response provider (model=%s)", provider_name, model_name)
    return RemoteResponseProvider(
        model,
        model_name=model_name,
        provider_name=provider_name,
        system_prompt=load_system_prompt(settings.system_prompt_path),
    )
