"""
Exceptions personnalisées pour modelrelay.
"""
from typing import Optional


class ModelRelayError(Exception):
    """Exception de base pour toutes les erreurs du client."""

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.message = message
        self.code = code or "unknown_error"
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"[{self.code}] {self.message} - Détails: {self.details}"
        return f"[{self.code}] {self.message}"


class ConfigurationMissing(ModelRelayError):
    """Aucune base URL, endpoint ou clé utilisable."""

    def __init__(self, message: str, config_key: str = None, code: str = "configuration_missing"):
        super().__init__(
            message=message,
            code=code,
            details={"key": config_key} if config_key else {}
        )


class CredentialRequired(ConfigurationMissing):
    """Le provider exige une clé API et aucune n'est disponible."""

    def __init__(self, message: str, provider: str = None):
        super().__init__(message=message, config_key="api_key", code="credential_required")
        if provider:
            self.details["provider"] = provider
        self.provider = provider


class UpstreamStatus(ModelRelayError):
    """Statut HTTP hors de la plage 2xx (appel direct ou via proxy)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        response_preview: Optional[str] = None,
    ):
        details = {}
        if status_code is not None:
            details["status_code"] = int(status_code)
        if url is not None:
            details["url"] = url
        if response_preview:
            details["response_preview"] = response_preview
        super().__init__(message=message, code="upstream_status", details=details)
        self.status_code = status_code
        self.url = url
        self.response_preview = response_preview


class UnexpectedContentType(ModelRelayError):
    """Réponse proxy qui n'est pas du JSON."""

    def __init__(self, message: str, content_type: str = None, url: str = None):
        details = {}
        if content_type is not None:
            details["content_type"] = content_type
        if url is not None:
            details["url"] = url
        super().__init__(message=message, code="unexpected_content_type", details=details)
        self.content_type = content_type


class ProxyExhausted(ModelRelayError):
    """Tous les proxies ont échoué pour une même requête logique."""

    def __init__(self, message: str, target_url: str = None, attempts: int = 0, last_error: str = None):
        details = {"attempts": attempts}
        if target_url is not None:
            details["target_url"] = target_url
        if last_error is not None:
            details["last_error"] = last_error
        super().__init__(message=message, code="proxy_exhausted", details=details)
        self.attempts = attempts


class StreamUnsupported(ModelRelayError):
    """Aucun flux lisible n'est disponible pour la réponse."""

    def __init__(self, message: str = "Streaming non supporté dans cet environnement"):
        super().__init__(message=message, code="stream_unsupported")


class ModelResolutionFailed(ModelRelayError):
    """Mapping de routage absent ou tâche incompatible pour le modèle."""

    def __init__(self, message: str, model: str = None, task: str = None):
        details = {}
        if model is not None:
            details["model"] = model
        if task is not None:
            details["task"] = task
        super().__init__(message=message, code="model_resolution_failed", details=details)
        self.model = model
        self.task = task
