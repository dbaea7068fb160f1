"""Abstract base class for pipeline steps and step context."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from sitesmith.config import Settings
    from sitesmith.models.session import Session
    from sitesmith.services import Services

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class StepContext:
    """Bundles everything a step needs to execute."""

    settings: Settings
    services: Services
    session: Session
    correlation_id: str = ""


class AbstractStep(ABC):
    """Base class for all pipeline steps.

    A step receives the current session and returns the updated one. Steps
    never persist; the pipeline saves after every step.
    """

    name: str = ""
    # A failing non-fatal step is logged and the pipeline carries on.
    fatal: bool = True

    @abstractmethod
    async def run(self, ctx: StepContext) -> Session:
        """Execute this step. Returns the updated session."""
        ...

    def is_complete(self, session: Session) -> bool:
        """Check if this step's effect is already recorded on the session."""
        return False

    def should_skip(self, _session: Session) -> bool:
        """Override to skip this step conditionally (e.g., no domain to configure)."""
        return False


# Global step registry
_step_registry: dict[str, AbstractStep] = {}


def register_step(cls: type[AbstractStep]) -> type[AbstractStep]:
    """Decorator that registers a step class by its name."""
    instance = cls()
    if not instance.name:
        raise ValueError(f"Step {cls.__name__} must define a name")
    if instance.name in _step_registry:
        existing = _step_registry[instance.name]
        raise ValueError(
            f"Step name {instance.name!r} already registered by {existing.__class__.__name__}"
        )
    _step_registry[instance.name] = instance
    logger.debug("Registered step", step=instance.name)
    return cls


def get_step_registry() -> dict[str, AbstractStep]:
    """Return the global step registry (name → instance)."""
    return _step_registry
