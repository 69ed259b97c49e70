"""
Tests unitaires pour la résolution d'alias de modèles.
"""
import random
from collections import Counter

from modelrelay.transport.aliases import AliasTable


class TestResolve:
    """Tests de la résolution nom logique -> identifiant."""

    def test_string_target(self):
        table = AliasTable({"llama-3.3-70b": "llama"})
        assert table.resolve("llama-3.3-70b") == "llama"

    def test_unmapped_name_passes_through(self):
        table = AliasTable({"a": "b"})
        assert table.resolve("vendor/model-x") == "vendor/model-x"

    def test_default_used_when_name_missing(self):
        table = AliasTable({"fast": "small"})
        assert table.resolve(None, "fast") == "small"
        assert table.resolve("", "other") == "other"

    def test_empty_sequence_returns_name(self):
        table = AliasTable({"ghost": []})
        assert table.resolve("ghost") == "ghost"

    def test_sequence_pick_is_member(self, seeded_rng):
        members = ["m-a", "m-b", "m-c"]
        table = AliasTable({"pool": members}, rng=seeded_rng)
        for _ in range(20):
            assert table.resolve("pool") in members

    def test_sequence_pick_redrawn_on_each_call(self):
        """Tirage uniforme, non mis en cache: chaque membre finit par sortir."""
        table = AliasTable({"pool": ["m-a", "m-b"]}, rng=random.Random(7))
        picks = Counter(table.resolve("pool") for _ in range(1000))
        assert set(picks) == {"m-a", "m-b"}
        assert 400 < picks["m-a"] < 600

    def test_same_seed_same_picks(self):
        first = AliasTable({"pool": ["a", "b", "c"]}, rng=random.Random(3))
        second = AliasTable({"pool": ["a", "b", "c"]}, rng=random.Random(3))
        assert [first.resolve("pool") for _ in range(10)] == [second.resolve("pool") for _ in range(10)]


class TestSwap:
    """Tests de la table inverse (affichage)."""

    def test_every_member_maps_back(self):
        table = AliasTable({"flux-pro": ["bfl/FLUX.1.1-pro", "bfl/FLUX.1-pro"], "gpt-image": "gptimage"})
        assert table.swap == {
            "bfl/FLUX.1.1-pro": "flux-pro",
            "bfl/FLUX.1-pro": "flux-pro",
            "gptimage": "gpt-image",
        }

    def test_last_writer_wins(self):
        table = AliasTable({"first": "shared", "second": "shared"})
        assert table.display_name("shared") == "second"

    def test_list_names(self):
        table = AliasTable({"gpt-image": "gptimage"})
        assert table.list_names(["gptimage", "flux"]) == ["gpt-image", "flux"]

    def test_contains(self):
        table = AliasTable({"gpt-image": "gptimage"})
        assert "gpt-image" in table
        assert "gptimage" not in table
