"""Translation gateway abstractions."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

import requests

from .configuration import CaseTranslateConfig, canonical_provider_name
from .errors import GatewayConfigurationError, GatewayError
from .languages import LanguageCatalog, default_catalog

logger = logging.getLogger(__name__)

# Providers report this code when no language could be identified.
UNDEFINED_LANGUAGE = "und"


class TranslationGateway(ABC):
    """Adapter for a language detection and translation service."""

    name = "gateway"

    def __init__(self, *, debug: bool = False) -> None:
        self.debug = debug

    def detect_language(self, text: str) -> str | None:
        """Return the detected language code, or None when none was found."""

        if not text or not text.strip():
            return None
        code = (self._detect(text) or "").strip()
        if not code or code == UNDEFINED_LANGUAGE:
            return None
        return code

    def translate(self, text: str, target_code: str) -> str:
        """Translate plain text into ``target_code``; empty means nothing to apply."""

        if not text or not text.strip():
            return ""
        return self._translate(text, target_code) or ""

    def supported_languages(self) -> LanguageCatalog:
        return default_catalog()

    @abstractmethod
    def _detect(self, text: str) -> str | None:
        """Call the provider's detection endpoint."""

    @abstractmethod
    def _translate(self, text: str, target_code: str) -> str:
        """Call the provider's translation endpoint."""

    def _log_debug(self, label: str, payload: Any) -> None:
        """Emit request and response payloads when provider debugging is on."""

        if not self.debug:
            return
        try:
            if isinstance(payload, (dict, list)):
                message = json.dumps(payload, ensure_ascii=False, indent=2)
            else:
                message = str(payload)
        except (TypeError, ValueError):
            message = repr(payload)
        logger.debug("[%s] %s:\n%s", self.name, label, message)


class EchoTranslationGateway(TranslationGateway):
    """Offline gateway that reports a fixed language and echoes text back."""

    name = "echo"

    def __init__(self, *, detected_code: str = UNDEFINED_LANGUAGE, debug: bool = False) -> None:
        super().__init__(debug=debug)
        self.detected_code = detected_code

    def _detect(self, text: str) -> str | None:
        return self.detected_code

    def _translate(self, text: str, target_code: str) -> str:
        return text


class GoogleTranslateGateway(TranslationGateway):
    """Google Cloud Translation (v2 REST API) gateway."""

    name = "google"
    BASE_URL = "https://translation.googleapis.com/language/translate/v2"

    def __init__(
        self,
        *,
        api_key: str,
        session: requests.Session | None = None,
        timeout: float | None = None,
        debug: bool = False,
    ) -> None:
        super().__init__(debug=debug)
        if not api_key:
            raise GatewayConfigurationError(
                "Google Translate configuration missing. Provide an API key."
            )
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def _detect(self, text: str) -> str | None:
        data = self._request("POST", "/detect", data={"q": text})
        try:
            detections = data["detections"]
            return str(detections[0][0]["language"])
        except (KeyError, IndexError, TypeError) as exc:
            raise GatewayError(
                "Language detection response malformed: missing detections."
            ) from exc

    def _translate(self, text: str, target_code: str) -> str:
        data = self._request(
            "POST",
            "",
            data={"q": text, "target": target_code, "format": "text"},
        )
        try:
            return str(data["translations"][0]["translatedText"])
        except (KeyError, IndexError, TypeError) as exc:
            raise GatewayError(
                "Translation response malformed: missing translations."
            ) from exc

    def supported_languages(self) -> LanguageCatalog:
        data = self._request("GET", "/languages", params={"target": "en"})
        try:
            entries = data["languages"]
            languages = {
                str(entry["language"]): str(entry.get("name") or entry["language"])
                for entry in entries
            }
        except (KeyError, TypeError) as exc:
            raise GatewayError(
                "Language list response malformed: missing languages."
            ) from exc
        return LanguageCatalog(languages)

    def _request(
        self,
        method: str,
        path: str,
        *,
        data: Dict[str, str] | None = None,
        params: Dict[str, str] | None = None,
    ) -> Dict[str, Any]:
        query = {"key": self.api_key, **(params or {})}
        self._log_debug(f"request {method} {path or '/'}", {**(params or {}), **(data or {})})
        try:
            response = self.session.request(
                method,
                self.BASE_URL + path,
                params=query,
                data=data,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise GatewayError(f"Translation service unavailable: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None
        self._log_debug("response", payload if payload is not None else response.text)

        if response.status_code >= 400:
            message = response.reason or "request failed"
            if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
                message = payload["error"].get("message") or message
            raise GatewayError(
                f"Translation service returned HTTP {response.status_code}: {message}",
                status_code=response.status_code,
            )
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
            raise GatewayError("Translation service response empty or unrecognised.")
        return payload["data"]


class OpenAITranslationGateway(TranslationGateway):
    """Gateway that uses OpenAI (or Azure OpenAI) models for both calls."""

    name = "openai"
    DEFAULT_MODEL = "gpt-5-mini"

    DETECT_PROMPT = (
        "You identify the language of a document. Return only JSON shaped as "
        '{"language": "<code>"} where <code> is the ISO-639-1 code of the '
        'dominant language, or "und" when it cannot be determined. '
        "Do not add commentary. Do not wrap the JSON in markdown code fences."
    )
    TRANSLATE_PROMPT = (
        "You are a professional translator. Translate the user's text into the "
        "language with ISO-639 code {target}. Preserve line breaks, numbers and "
        "names. Return only the translated plain text without commentary."
    )

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str | None = None,
        azure: CaseTranslateConfig | None = None,
        client: Any = None,
        debug: bool = False,
    ) -> None:
        super().__init__(debug=debug)
        if client is not None:
            self._client, self._default_model = client, model or self.DEFAULT_MODEL
        elif azure is not None:
            self._client, self._default_model = self._build_azure_client(azure)
        else:
            self._client, self._default_model = self._build_openai_client(api_key)
        if model:
            self._default_model = model

    def _build_openai_client(self, api_key: str | None) -> tuple[Any, str]:
        if not api_key:
            raise GatewayConfigurationError(
                "OpenAI configuration missing. Set OPENAI_API_KEY or provide an API key."
            )
        try:
            from openai import OpenAI  # type: ignore
        except ImportError as exc:  # pragma: no cover - import guard
            raise GatewayConfigurationError(
                "OpenAI Python SDK not installed. Install with `pip install openai`."
            ) from exc

        return OpenAI(api_key=api_key), self.DEFAULT_MODEL

    def _build_azure_client(self, config: CaseTranslateConfig) -> tuple[Any, str]:
        try:
            from openai import AzureOpenAI  # type: ignore
        except ImportError as exc:  # pragma: no cover - import guard
            raise GatewayConfigurationError(
                "OpenAI Python SDK not installed. Install with `pip install openai`."
            ) from exc

        client = AzureOpenAI(
            api_key=config.AZURE_OPENAI_API_KEY,
            api_version=config.AZURE_OPENAI_API_VERSION,
            azure_endpoint=config.AZURE_OPENAI_ENDPOINT,
        )
        return client, config.AZURE_OPENAI_DEPLOYMENT_NAME  # type: ignore[return-value]

    def _detect(self, text: str) -> str | None:
        content = self._invoke_model(system_prompt=self.DETECT_PROMPT, user_text=text)
        content = self._strip_code_fence(content)
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as exc:
            raise GatewayError(f"Detection response was not valid JSON: {exc}") from exc
        language = parsed.get("language") if isinstance(parsed, dict) else None
        if not isinstance(language, str):
            raise GatewayError("Detection response malformed: missing language.")
        return language

    def _translate(self, text: str, target_code: str) -> str:
        return self._invoke_model(
            system_prompt=self.TRANSLATE_PROMPT.format(target=target_code),
            user_text=text,
        )

    def _invoke_model(self, *, system_prompt: str, user_text: str) -> str:
        """Call the Responses API and return the output text."""

        self._log_debug("request.system_prompt", system_prompt)
        try:
            response = self._client.responses.create(
                model=self._default_model,
                input=[
                    {
                        "role": "system",
                        "content": [{"type": "input_text", "text": system_prompt}],
                    },
                    {
                        "role": "user",
                        "content": [{"type": "input_text", "text": user_text}],
                    },
                ],
            )
        except Exception as exc:  # pragma: no cover - network call
            raise GatewayError(f"Translation service unavailable: {exc}") from exc
        self._log_debug("response.raw", self._safe_dump_response(response))
        return self._extract_text(response)

    def _extract_text(self, response: Any) -> str:
        output_text = getattr(response, "output_text", None)
        if hasattr(output_text, "value"):
            output_text = output_text.value
        if output_text:
            return str(output_text).strip()

        parts: list[str] = []
        for item in getattr(response, "output", None) or []:
            for part in getattr(item, "content", None) or []:
                text_value = getattr(part, "text", None)
                if hasattr(text_value, "value"):
                    text_value = text_value.value
                if text_value:
                    parts.append(str(text_value))
        if parts:
            return "\n".join(parts).strip()

        raise GatewayError("Translation service response empty or unrecognised.")

    def _safe_dump_response(self, response: Any) -> Any:
        """Best-effort conversion of SDK response objects into JSON-friendly data."""

        for attr in ("model_dump_json", "model_dump"):
            candidate = getattr(response, attr, None)
            if candidate:
                try:
                    data = candidate()
                    if isinstance(data, str):
                        return json.loads(data)
                    return data
                except (TypeError, ValueError):
                    continue
        return str(response)

    def _strip_code_fence(self, text: str) -> str:
        """Remove leading/trailing markdown code fences if present."""

        stripped = text.strip()
        if not stripped.startswith("```"):
            return stripped

        # Drop opening fence and optional language hint.
        first_newline = stripped.find("\n")
        if first_newline == -1:
            return stripped
        body = stripped[first_newline + 1 :]
        closing_index = body.rfind("```")
        if closing_index != -1:
            body = body[:closing_index]
        return body.strip()


class LegacyOpenAITranslationGateway(OpenAITranslationGateway):
    """OpenAI gateway that uses the Chat Completions API for compatibility."""

    name = "legacy_openai"

    def _invoke_model(self, *, system_prompt: str, user_text: str) -> str:
        self._log_debug("request.system_prompt", system_prompt)
        try:
            response = self._client.chat.completions.create(
                model=self._default_model,
                temperature=0,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_text},
                ],
            )
        except Exception as exc:  # pragma: no cover - network call
            raise GatewayError(f"Translation service unavailable: {exc}") from exc
        self._log_debug("response.raw", self._safe_dump_response(response))

        for choice in getattr(response, "choices", None) or []:
            message = getattr(choice, "message", None)
            content = getattr(message, "content", None) if message is not None else None
            if content:
                return str(content).strip()

        raise GatewayError("Translation service response empty or unrecognised.")


def build_gateway(
    name: str | None,
    *,
    api_key: str | None,
    config: CaseTranslateConfig | None = None,
    debug: bool = False,
) -> TranslationGateway:
    """Factory to create gateways by provider name."""

    normalized = canonical_provider_name(name or "google")
    if normalized is None:
        raise GatewayConfigurationError(f"Unknown translation provider '{name}'.")

    model = config.OPENAI_MODEL if config is not None else None
    if normalized == "google":
        key = api_key or (config.GOOGLE_TRANSLATE_API_KEY if config is not None else None)
        return GoogleTranslateGateway(api_key=key or "", debug=debug)
    if normalized == "openai":
        key = api_key or (config.OPENAI_API_KEY if config is not None else None)
        return OpenAITranslationGateway(api_key=key, model=model, debug=debug)
    if normalized == "legacy_openai":
        key = api_key or (config.OPENAI_API_KEY if config is not None else None)
        return LegacyOpenAITranslationGateway(api_key=key, model=model, debug=debug)
    if normalized == "azure_openai":
        if config is None:
            raise GatewayConfigurationError(
                "Azure OpenAI requires AZURE_OPENAI_* configuration settings."
            )
        return OpenAITranslationGateway(api_key=None, azure=config, debug=debug)
    return EchoTranslationGateway(debug=debug)
