"""Filesystem and subprocess infrastructure."""
