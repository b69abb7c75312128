"""YAML configuration for the engine's static tables."""
