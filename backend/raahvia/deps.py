from __future__ import annotations

from fastapi import Request

from raahvia.services.catalog import NavigationCatalog


def get_catalog(request: Request) -> NavigationCatalog:
    """Catalog loaded by the app lifespan."""
    return request.app.state.catalog
