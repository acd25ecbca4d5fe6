"""Shared models and utilities used across Jennifer services."""
