"""Protocol-based interfaces for Pixel Empires collaborators.

The HTTP runtime depends on these protocols rather than on a concrete
storage backend, so tests can inject in-memory fakes.
"""

from pixel_empires.interfaces.saves import ISaveRepository

__all__ = ["ISaveRepository"]
