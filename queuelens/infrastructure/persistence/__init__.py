"""Persistencia MySQL (SQLAlchemy async) y repositorios en memoria."""
