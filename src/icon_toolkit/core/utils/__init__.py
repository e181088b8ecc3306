"""Utility helpers for the core models."""
