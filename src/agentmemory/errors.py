"""Error taxonomy for agentmemory.

Callers branch on these types. Transport errors raised by remote backends
(httpx, redis) are never wrapped in one of these; they propagate as-is so
network failure stays distinguishable from a contract violation.
"""

from typing import Optional


class AgentMemoryError(Exception):
    """Base class for all agentmemory errors."""


class ValidationError(AgentMemoryError, ValueError):
    """Configuration is malformed or incomplete after merging with defaults.

    Attributes:
        errors: List of (dotted_path, message) pairs, one per problem.
    """

    def __init__(self, errors: list[tuple[str, str]]):
        self.errors = errors
        details = "; ".join(f"{path}: {message}" for path, message in errors)
        super().__init__(f"Invalid configuration: {details}")


class UnsupportedProviderError(AgentMemoryError, ValueError):
    """No implementation is registered under the requested provider name."""

    def __init__(self, family: str, provider: str):
        self.family = family
        self.provider = provider
        super().__init__(f"Unsupported {family} provider: {provider}")


class DimensionMismatchError(AgentMemoryError, ValueError):
    """A vector's length differs from the collection's fixed dimension."""

    def __init__(self, expected: int, actual: int, vector_id: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        self.vector_id = vector_id
        target = f"vector {vector_id}" if vector_id is not None else "query"
        super().__init__(
            f"Dimension mismatch for {target}: expected {expected}, got {actual}"
        )


class NotApplicableError(AgentMemoryError, NotImplementedError):
    """The operation has no meaning for this backend."""

    def __init__(self, operation: str, backend: str):
        self.operation = operation
        self.backend = backend
        super().__init__(f"{operation} is not applicable for {backend}")
