"""
Unit tests for network alias resolution.
"""

from obsplanner.domain.networks import NetworkDirectory, canonical_network


def test_canonical_network_aliases():
    assert canonical_network("CBC TV") == "CBC TV"
    assert canonical_network("cbc gem") == "CBC Gem"
    assert canonical_network("CBC Web") == "CBC Gem"
    assert canonical_network("web") == "CBC Gem"
    assert canonical_network("Radio-Canada") == "R-C TV/WEB"
    assert canonical_network("Eurosport") is None
    assert canonical_network(None) is None


def test_directory_resolves_ids_once():
    directory = NetworkDirectory.resolve(
        [
            {"id": "n1", "name": "CBC TV"},
            {"id": "n2", "name": "Gem"},
            {"id": "n3", "name": "CBC Web"},
            {"id": "n4", "name": "Other"},
        ]
    )
    assert directory.ids == {"CBC TV": "n1", "CBC Gem": "n2"}
    assert directory.id_for("web") == "n2"
    assert directory.id_for("R-C") is None
    assert directory.id_for("") is None
