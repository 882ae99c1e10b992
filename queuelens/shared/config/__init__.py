"""Configuración (pydantic-settings)."""
