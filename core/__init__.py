# Nombre de archivo: __init__.py
# Ubicación de archivo: core/__init__.py
# Descripción: Paquete central del directorio operativo (dominio, importador, servicios)

"""Lógica compartida por la API: directorio, motor de importación y servicios."""

from .secrets import get_secret

__all__ = ["get_secret"]
