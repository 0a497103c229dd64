"""Connector Rollout Verifier.

Azure Durable Functions worker that confirms, after a connector rollout,
that an actor definition's default version in the registry has converged
to the expected image tag within a bounded time budget.
"""

__version__ = "0.1.0"
