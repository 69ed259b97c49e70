"""
Dataclasses métier pour modelrelay.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Sequence, Union

from .constants import DEFAULT_IMAGE_MODEL, DEFAULT_TIMEOUT
from .exceptions import ConfigurationMissing

AliasTarget = Union[str, Sequence[str]]
ModelType = Literal["chat", "image"]


@dataclass(frozen=True)
class ClientConfig:
    """
    Configuration résolue d'une "connexion" vers un provider.

    Les endpoints absents sont dérivés de `base_url`:
    - chat: {base_url}/chat/completions
    - images: {base_url}/images/generations
    - modèles: {base_url}/models

    Le jeu de headers est calculé une seule fois à la construction
    (Content-Type, Authorization si une clé est fournie, puis extra_headers).
    """
    base_url: str
    chat_endpoint: Optional[str] = None
    image_endpoint: Optional[str] = None
    models_endpoint: Optional[str] = None
    api_key: Optional[str] = None
    extra_headers: Dict[str, str] = field(default_factory=dict)
    default_chat_model: Optional[str] = None
    default_image_model: str = DEFAULT_IMAGE_MODEL
    model_aliases: Dict[str, AliasTarget] = field(default_factory=dict)
    referrer: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    headers: Dict[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.base_url:
            raise ConfigurationMissing("base_url requise", config_key="base_url")

        base = self.base_url.rstrip("/")
        object.__setattr__(self, "base_url", base)
        if not self.chat_endpoint:
            object.__setattr__(self, "chat_endpoint", f"{base}/chat/completions")
        if not self.image_endpoint:
            object.__setattr__(self, "image_endpoint", f"{base}/images/generations")
        if not self.models_endpoint:
            object.__setattr__(self, "models_endpoint", f"{base}/models")

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        headers.update(self.extra_headers or {})
        object.__setattr__(self, "headers", headers)

    @property
    def uses_image_template(self) -> bool:
        """True si l'endpoint image attend le prompt dans le chemin."""
        return "{prompt}" in self.image_endpoint


@dataclass
class ModelDescriptor:
    """Entrée de catalogue normalisée."""
    id: str
    type: ModelType = "chat"
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convertit le descripteur en dictionnaire (champs upstream conservés)."""
        return {**self.extra, "id": self.id, "type": self.type}


@dataclass
class ModelConfig:
    """Métadonnées de génération par modèle (catalogue Together)."""
    stop: List[str] = field(default_factory=list)
    chat_template: Optional[str] = None
    bos_token: Optional[str] = None
    eos_token: Optional[str] = None
    context_length: Optional[int] = None

    @classmethod
    def from_catalog_entry(cls, entry: Dict[str, Any]) -> "ModelConfig":
        """Crée une instance depuis une entrée du catalogue /models."""
        config = entry.get("config")
        if not config:
            return cls()
        return cls(
            stop=list(config.get("stop") or []),
            chat_template=config.get("chat_template"),
            bos_token=config.get("bos_token"),
            eos_token=config.get("eos_token"),
            context_length=entry.get("context_length"),
        )
