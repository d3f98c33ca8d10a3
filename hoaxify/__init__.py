"""Hoaxify profile API: authentication, sessions and profile updates."""
