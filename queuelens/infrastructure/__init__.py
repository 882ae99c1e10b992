"""
QueueLens – Infrastructure Layer
==================================
Implementaciones concretas de interfaces.

Este módulo contiene:
- persistence/: Base de datos (MySQL) + repositorios en memoria
- cache/: Cache Stores (memoria del proceso, Redis)

REGLA DE DEPENDENCIA:
Esta capa implementa interfaces definidas en:
- domain/repositories/
- application/ports/

Puede importar de:
- domain/ (entidades, interfaces)
- application/ (ports)
- shared/ (config, logging)
"""
