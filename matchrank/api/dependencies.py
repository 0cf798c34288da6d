"""Shared route dependencies."""

from fastapi import HTTPException, Request

from matchrank.services.selector import MatchSelector


def get_selector(request: Request) -> MatchSelector:
    """The selector owned by the app."""
    selector = request.app.state.selector
    if selector is None:
        raise HTTPException(status_code=503, detail="Selector not initialized")
    return selector
