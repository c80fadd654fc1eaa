"""Modelos y errores del dominio.

Por qué:
- Estructuras de datos puras y estrictas (Pydantic v2) más el vocabulario de errores.
- El dominio no conoce HTTP, la CLI ni la disposición del sistema de archivos.
"""
