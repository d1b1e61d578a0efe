"""Exception types raised by the repository layer.

Invariant violations (role and activation rules) are reported as return
values, not exceptions. Storage failures from SQLAlchemy propagate as-is.
"""

from __future__ import annotations


class MissingArgumentError(ValueError):
    """A required record or collaborator was None."""


class GatewayClosedError(RuntimeError):
    """A unit of work was submitted to a gateway that is not open."""


class SchemaDriftError(RuntimeError):
    """A collection holds rows of an incompatible historical shape."""

    def __init__(self, collection: str, detail: str) -> None:
        super().__init__(f"Collection '{collection}' has drifted: {detail}")
        self.collection = collection
        self.detail = detail


class UserNotFoundError(LookupError):
    """No active user matches the given identity."""


def require(value: object, name: str) -> None:
    """Fail fast when a required argument is None."""
    if value is None:
        msg = f"{name} is required"
        raise MissingArgumentError(msg)
