"""Registry of advertised model ids and the upstream models they map to."""
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

DEFAULT_MODELS = {
    "gpt-4o-mini": "gpt-4o-mini",
    "claude-3-haiku-20240307": "claude-3-haiku-20240307",
    "meta-llama/Meta-Llama-3.1-70B-Instruct-Turbo": "meta-llama/Meta-Llama-3.1-70B-Instruct-Turbo",
    "mistralai/Mixtral-8x7B-Instruct-v0.1": "mistralai/Mixtral-8x7B-Instruct-v0.1",
}

OWNED_BY = "duckduckgo"


class ModelRegistry:
    """Read-only mapping of external model ids to upstream model ids."""

    def __init__(self, models: Optional[Mapping[str, str]] = None):
        self._models = MappingProxyType(dict(models or DEFAULT_MODELS))

    def __contains__(self, model_id) -> bool:
        return isinstance(model_id, str) and model_id in self._models

    def resolve(self, model_id: str) -> Optional[str]:
        if model_id not in self:
            return None
        return self._models[model_id]

    def ids(self) -> List[str]:
        return list(self._models.keys())

    def list_response(self) -> List[Dict[str, str]]:
        """Entries for an OpenAI-compatible /v1/models listing."""
        return [{"id": model_id, "object": "model", "owned_by": OWNED_BY} for model_id in self._models]
