"""Core module for the link shortener application."""

from link_shortener.core.config import settings

__all__ = ["settings"]
