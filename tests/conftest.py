"""
Configuration des tests pytest.
"""
import json
import os
import random
import sys

import httpx
import pytest

# Ajoute src au path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


# Configuration pytest-asyncio
def pytest_configure(config):
    """Configure pytest pour async."""
    config.addinivalue_line(
        "markers", "asyncio: marque un test comme asynchrone"
    )


class RecordingHandler:
    """
    Handler httpx.MockTransport qui enregistre les requêtes reçues.

    `routes` associe une URL (sans query) ou un préfixe d'URL à une réponse,
    une liste de réponses (consommées dans l'ordre) ou un callable.
    """

    def __init__(self, routes=None, default=None):
        self.routes = dict(routes or {})
        self.default = default
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        route = self.routes.get(url.split("?")[0])
        if route is None:
            for prefix, candidate in self.routes.items():
                if url.startswith(prefix):
                    route = candidate
                    break
        if route is None:
            route = self.default
        if route is None:
            return httpx.Response(404, json={"error": "not mocked", "url": url})
        if isinstance(route, list):
            route = route.pop(0)
        if callable(route):
            return route(request)
        if route.is_stream_consumed:
            # Réponse déjà lue: copie fraîche pour chaque requête
            return httpx.Response(route.status_code, headers=route.headers, content=route.content)
        return route

    def json_bodies(self):
        return [json.loads(request.content) for request in self.requests if request.content]


@pytest.fixture
def make_http_client():
    """Fabrique un httpx.AsyncClient adossé à un MockTransport."""
    def factory(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return factory


@pytest.fixture
def recording_handler():
    return RecordingHandler


@pytest.fixture
def seeded_rng():
    """Générateur aléatoire déterministe pour les alias multi-cibles."""
    return random.Random(42)


@pytest.fixture
def test_config():
    """Fixture pour la configuration de test (config.toml chargé)."""
    return {
        "default_provider": "custom",
        "timeout": 30,
        "providers": {
            "Custom": {
                "base_url": "http://localhost:9999/v1",
                "api_key": "test-key",
                "default_model": "test-model",
                "model_aliases": {"fast": ["small-a", "small-b"]},
            },
            "together": {
                "api_key": "together-key",
                "headers": {"X-Team": "qa"},
            },
        },
    }


@pytest.fixture
def sample_messages():
    """Fixture pour des messages de test."""
    return [
        {"role": "system", "content": "Tu es un assistant utile."},
        {"role": "user", "content": "Bonjour, comment ça va?"},
        {"role": "assistant", "content": "Je vais bien, merci!"}
    ]
