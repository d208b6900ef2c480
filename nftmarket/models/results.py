"""Result union returned at the API surface.

``MarketplaceGateway`` never raises for a rejected operation; it returns
``Err`` carrying the typed error, or ``Ok`` carrying the operation's value.
Callers branch on ``status`` (or ``isinstance``) instead of catching.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from nftmarket.models.errors import MarketError


class Ok(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["ok"] = "ok"
    value: Any = None

    @property
    def is_ok(self) -> bool:
        return True


class Err(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["err"] = "err"
    error: MarketError

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def kind(self) -> str:
        """Shortcut for ``error.kind``."""
        return self.error.kind


OperationResult = Annotated[Union[Ok, Err], Field(discriminator="status")]
