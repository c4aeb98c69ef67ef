"""Core messaging infrastructure for PokeNews."""
