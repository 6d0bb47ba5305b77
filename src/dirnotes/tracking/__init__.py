"""Tracked-directory storage, change detection and synchronization."""
