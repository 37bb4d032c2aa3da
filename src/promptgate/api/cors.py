"""Cross-origin policy scoped to a path prefix.

Starlette's :class:`~starlette.middleware.cors.CORSMiddleware` applies to the
whole application.  The proxy only grants cross-origin access under its
``/ai`` prefix, so this wrapper routes matching requests through the CORS
middleware and passes everything else straight to the application.

Origins are matched exactly against a static allow-list; there is no wildcard
or regex matching.
"""

from __future__ import annotations

from collections.abc import Sequence

from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send


class PrefixCORSMiddleware:
    """Apply :class:`CORSMiddleware` only to paths under *prefix*.

    Args:
        app: Downstream ASGI application.
        prefix: Path prefix such as ``"/ai"``.  Both ``/ai`` itself and
            ``/ai/...`` match; ``/aix`` does not.
        allow_origins: Exact origins allowed to read responses.
        allow_methods: Methods advertised on preflight.
        allow_headers: Request headers allowed on preflight.
        expose_headers: Response headers exposed to the browser.
        allow_credentials: Send ``Access-Control-Allow-Credentials: true``.
        max_age: Preflight cache lifetime in seconds.
    """

    def __init__(
        self,
        app: ASGIApp,
        prefix: str,
        allow_origins: Sequence[str] = (),
        allow_methods: Sequence[str] = ("GET",),
        allow_headers: Sequence[str] = (),
        expose_headers: Sequence[str] = (),
        allow_credentials: bool = False,
        max_age: int = 600,
    ) -> None:
        self.app = app
        self.prefix = prefix.rstrip("/")
        self.cors = CORSMiddleware(
            app,
            allow_origins=list(allow_origins),
            allow_methods=list(allow_methods),
            allow_headers=list(allow_headers),
            expose_headers=list(expose_headers),
            allow_credentials=allow_credentials,
            max_age=max_age,
        )

    def matches(self, path: str) -> bool:
        """Return ``True`` if *path* falls under the configured prefix."""
        if not self.prefix:
            return True
        return path == self.prefix or path.startswith(self.prefix + "/")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and self.matches(scope["path"]):
            await self.cors(scope, receive, send)
            return
        await self.app(scope, receive, send)
