"""Variable resolution interfaces.

Defines the request/result types and the abstract base class for the
ordered strategies that map a template variable name to a payload value.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from formflow.strategies.field_resolution.models import FieldCatalog, SubmissionPayload


@dataclass(frozen=True)
class ResolutionRequest:
    """A single variable lookup.

    Attributes:
        form_id: Form the submission belongs to.
        variable_name: The variable as written in the template, trimmed.
        payload: Normalized submission payload.
    """

    form_id: str
    variable_name: str
    payload: SubmissionPayload


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of a lookup. A miss is a result, not an exception.

    Attributes:
        found: Whether any strategy produced a value.
        value: The resolved value (may legitimately be None when the payload holds null).
        strategy: Name of the strategy that matched.
    """

    found: bool
    value: Any = None
    strategy: str | None = None

    @classmethod
    def hit(cls, value: Any, strategy: str) -> ResolutionResult:
        return cls(found=True, value=value, strategy=strategy)

    @classmethod
    def miss(cls) -> ResolutionResult:
        return cls(found=False)


class BaseResolutionStrategy(ABC):
    """Abstract base class for one step of the resolution chain.

    Strategies are pure: they read the request and the field catalog and
    either return a hit or a miss. The resolver runs them in order and
    stops at the first hit.
    """

    #: Whether the strategy needs the form's field catalog.
    uses_catalog: bool = True

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the strategy name used in events and results."""

    @abstractmethod
    def resolve(self, request: ResolutionRequest, catalog: FieldCatalog) -> ResolutionResult:
        """Attempt to resolve the request.

        Args:
            request: The variable lookup.
            catalog: The form's flattened field descriptors (possibly empty).

        Returns:
            A hit with the value, or a miss.
        """
