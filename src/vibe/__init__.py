"""Dagens Vibe: a composite day score from weather, news, market, energy and mood."""

__version__ = "1.0.0"
