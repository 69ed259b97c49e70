"""
Résolution des alias de modèles (nom logique -> identifiant provider).

Un alias peut pointer vers une chaîne (résolution déterministe) ou vers une
séquence d'identifiants équivalents: dans ce cas un membre est tiré
uniformément au hasard à CHAQUE appel (non mis en cache).
"""
import logging
import random
from typing import Dict, Iterable, List, Mapping, Optional

from ..core.models import AliasTarget

logger = logging.getLogger(__name__)


class AliasTable:
    """Table d'alias + table inverse (swap) utilisée pour l'affichage."""

    def __init__(self, aliases: Optional[Mapping[str, AliasTarget]] = None, rng: random.Random = None):
        self.aliases: Dict[str, AliasTarget] = dict(aliases or {})
        self._rng = rng or random.Random()
        self.swap: Dict[str, str] = {}
        for alias, target in self.aliases.items():
            members = [target] if isinstance(target, str) else list(target)
            for physical_id in members:
                # Dernier écrit gagne en cas de collision
                self.swap[physical_id] = alias

    def __contains__(self, name: str) -> bool:
        return name in self.aliases

    def resolve(self, name: Optional[str], default: Optional[str] = None) -> Optional[str]:
        """
        Retourne l'identifiant physique pour `name` (ou `default` si absent).

        Les noms non mappés sont retournés inchangés.
        """
        if not name:
            name = default
        if name is None or name not in self.aliases:
            return name

        target = self.aliases[name]
        if isinstance(target, str):
            logger.debug(f"Modèle '{target}' utilisé pour l'alias '{name}'")
            return target

        members = list(target)
        if not members:
            return name
        selected = self._rng.choice(members)
        logger.debug(f"Modèle '{selected}' tiré pour l'alias '{name}'")
        return selected

    def display_name(self, physical_id: str) -> str:
        """Nom logique pour un identifiant physique (inchangé si non mappé)."""
        return self.swap.get(physical_id, physical_id)

    def list_names(self, physical_ids: Iterable[str]) -> List[str]:
        return [self.display_name(physical_id) for physical_id in physical_ids]
