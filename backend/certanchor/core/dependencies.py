"""FastAPI dependencies for application-scoped configuration."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from certanchor.core.config import Settings


def get_app_settings(request: Request) -> Settings:
    """Return the settings the running application was created with."""
    return request.app.state.settings  # type: ignore[no-any-return]


# Type alias for dependency injection
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
