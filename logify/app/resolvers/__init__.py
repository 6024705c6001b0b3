"""
Object Resolvers

One resolver per kind of host object, looked up by type in the registry.
"""

from .base import ObjectResolver
from .registry import ResolverRegistry

__all__ = [
    "ObjectResolver",
    "ResolverRegistry",
]
