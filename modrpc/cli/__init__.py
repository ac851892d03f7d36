"""CLI module for modrpc."""
