"""Linkhub backend application."""
