"""Shooting range target controller."""
