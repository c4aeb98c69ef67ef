"""PokeNews plugins."""
