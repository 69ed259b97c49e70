"""
Point d'entrée pour `python -m modelrelay`.
"""
import logging

import uvicorn

from .config.loader import load_config
from .config.settings import Settings
from .core.exceptions import ConfigurationMissing
from .main import create_app
from .providers.registry import available_providers


def main():
    """Fonction principale."""
    import argparse

    parser = argparse.ArgumentParser(description="modelrelay - gateway OpenAI-compatible")
    parser.add_argument("--host", default="127.0.0.1", help="Host (défaut: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port (défaut: 8000)")
    parser.add_argument("--provider", choices=available_providers(), help="Provider servi (défaut: config)")
    parser.add_argument("--config", help="Chemin du config.toml (défaut: $MODELRELAY_CONFIG ou ./config.toml)")
    parser.add_argument("--log-level", default="info", help="Niveau de log (défaut: info)")

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = Settings.from_config(load_config(args.config))
    except ConfigurationMissing as e:
        logging.getLogger(__name__).warning(f"{e.message}, configuration par défaut utilisée")
        settings = Settings()

    provider = args.provider or settings.default_provider
    print(f"🚀 Démarrage de modelrelay ({provider}) sur {args.host}:{args.port}")

    uvicorn.run(
        create_app(settings=settings, provider=provider),
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
