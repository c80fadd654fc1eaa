"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers, autenticación y política TLS en cada llamada a GitHub.
- Fácil de testear: se pasa un `httpx.MockTransport` en lugar de la red.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings


def build_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` con los valores por defecto de la herramienta.

    El token de GitHub, si está configurado, se envía como `Authorization: token ...`.
    `ignore_tls_errors` desactiva la verificación de certificados.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if settings.github_token:
        headers["Authorization"] = f"token {settings.github_token}"
    if extra_headers:
        headers.update(extra_headers)
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        verify=not settings.ignore_tls_errors,
        transport=transport,
    )
