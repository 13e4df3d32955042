"""Model catalog returned by ``GET /models``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from aiclient.errors import DeserializationError

__all__ = ["Architecture", "ModelCatalog", "ModelEntry", "Pricing", "TopProvider"]


def _get(data: dict, key: str, where: str) -> Any:
    try:
        return data[key]
    except (KeyError, TypeError):
        raise DeserializationError(f"missing field `{key}` in {where}") from None


@dataclass(frozen=True)
class Architecture:
    modality: str
    input_modalities: tuple[str, ...] = ()
    output_modalities: tuple[str, ...] = ()
    tokenizer: str = ""
    instruct_type: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Architecture:
        return cls(
            modality=_get(data, "modality", "architecture"),
            input_modalities=tuple(data.get("input_modalities") or ()),
            output_modalities=tuple(data.get("output_modalities") or ()),
            tokenizer=data.get("tokenizer") or "",
            instruct_type=data.get("instruct_type"),
        )


@dataclass(frozen=True)
class Pricing:
    """Per-token prices as the provider reports them (decimal strings)."""

    prompt: str
    completion: str
    request: str | None = None
    image: str | None = None
    web_search: str | None = None
    internal_reasoning: str | None = None
    input_cache_read: str | None = None
    input_cache_write: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Pricing:
        return cls(
            prompt=_get(data, "prompt", "pricing"),
            completion=_get(data, "completion", "pricing"),
            request=data.get("request"),
            image=data.get("image"),
            web_search=data.get("web_search"),
            internal_reasoning=data.get("internal_reasoning"),
            input_cache_read=data.get("input_cache_read"),
            input_cache_write=data.get("input_cache_write"),
        )

    def __str__(self) -> str:
        parts = [f"prompt={self.prompt}", f"completion={self.completion}"]
        for name in ("request", "image", "web_search", "internal_reasoning",
                     "input_cache_read", "input_cache_write"):
            value = getattr(self, name)
            if value is not None:
                parts.append(f"{name}={value}")
        return ", ".join(parts)


@dataclass(frozen=True)
class TopProvider:
    context_length: int | None = None
    max_completion_tokens: int | None = None
    is_moderated: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> TopProvider:
        return cls(
            context_length=data.get("context_length"),
            max_completion_tokens=data.get("max_completion_tokens"),
            is_moderated=bool(data.get("is_moderated", False)),
        )


@dataclass(frozen=True)
class ModelEntry:
    id: str
    name: str
    created: int
    description: str
    context_length: int
    architecture: Architecture
    pricing: Pricing
    top_provider: TopProvider
    supported_parameters: frozenset[str] = field(default_factory=frozenset)
    hugging_face_id: str | None = None
    per_request_limits: dict[str, str] | None = None

    def supports(self, capability: str) -> bool:
        """True if *capability* (e.g. ``"tools"``) is a supported parameter."""
        return capability in self.supported_parameters

    @classmethod
    def from_dict(cls, data: dict) -> ModelEntry:
        where = f"model {data.get('id', '?')!r}" if isinstance(data, dict) else "model"
        return cls(
            id=_get(data, "id", where),
            name=_get(data, "name", where),
            created=_get(data, "created", where),
            description=data.get("description") or "",
            context_length=_get(data, "context_length", where) or 0,
            architecture=Architecture.from_dict(_get(data, "architecture", where)),
            pricing=Pricing.from_dict(_get(data, "pricing", where)),
            top_provider=TopProvider.from_dict(data.get("top_provider") or {}),
            supported_parameters=frozenset(data.get("supported_parameters") or ()),
            hugging_face_id=data.get("hugging_face_id") or None,
            per_request_limits=data.get("per_request_limits"),
        )


class ModelCatalog:
    """Read-only view of the fetched model list, in provider order.

    Filtering is left to the caller.
    """

    def __init__(self, models: list[ModelEntry]) -> None:
        self._models = list(models)

    @classmethod
    def from_dict(cls, data: dict) -> ModelCatalog:
        raw = _get(data, "data", "models response")
        if not isinstance(raw, list):
            raise DeserializationError("`data` must be a list")
        return cls([ModelEntry.from_dict(m) for m in raw])

    def get_models(self) -> list[ModelEntry]:
        return list(self._models)

    def __iter__(self) -> Iterator[ModelEntry]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)
