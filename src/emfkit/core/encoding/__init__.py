"""Wire encoders for metrics contexts."""

from emfkit.core.encoding.emf import LogSerializer, serialize

__all__ = ["LogSerializer", "serialize"]
