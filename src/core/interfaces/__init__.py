"""Interfaces/abstracciones del Core.

Por qué:
- Define los contratos (Protocol) que implementan los adaptadores concretos.
- El Core depende de abstracciones; el cliente de GitHub se sustituye en tests.
"""
