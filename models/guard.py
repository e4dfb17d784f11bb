# models/guard.py

from typing import Optional
from pydantic import BaseModel, ConfigDict

from models.enums import OutcomeKind, RouteClass


class GuardOutcome(BaseModel):
    """
    Result of one guard evaluation: show a loader, redirect, or render.
    `location` is set only for redirects.
    """

    model_config = ConfigDict(frozen=True)

    outcome: OutcomeKind
    location: Optional[str] = None
    classification: Optional[RouteClass] = None

    @classmethod
    def show_loading(cls) -> "GuardOutcome":
        return cls(outcome=OutcomeKind.show_loading)

    @classmethod
    def redirect_to(cls, location: str, classification: Optional[RouteClass] = None) -> "GuardOutcome":
        return cls(outcome=OutcomeKind.redirect, location=location, classification=classification)

    @classmethod
    def render(cls, classification: Optional[RouteClass] = None) -> "GuardOutcome":
        return cls(outcome=OutcomeKind.render, classification=classification)

    @property
    def is_render(self) -> bool:
        return self.outcome == OutcomeKind.render

    @property
    def is_redirect(self) -> bool:
        return self.outcome == OutcomeKind.redirect
