"""Feature modules, each exposing its blueprints from its package root."""
