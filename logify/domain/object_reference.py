"""
Object Reference

A possibly-dangling pointer to a host object (post, user, term, ...). It carries
the object's name as captured at event time so it can still be displayed after
the object is deleted.
"""

from typing import TYPE_CHECKING, Any, Optional, Union

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from logify.app.resolvers.registry import ResolverRegistry


class DisplayTag(BaseModel):
    """How an object reference is presented: a link to the live object, or a span"""

    kind: str  # "link" | "span"
    text: str
    href: Optional[str] = None
    deleted: bool = False

    @classmethod
    def link(cls, href: str, text: str) -> "DisplayTag":
        return cls(kind="link", href=href, text=text)

    @classmethod
    def span(cls, text: str, deleted: bool = False) -> "DisplayTag":
        return cls(kind="span", text=text, deleted=deleted)


class ObjectReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    key: Union[int, str, None] = None
    name: Optional[str] = None

    @classmethod
    def from_snapshot(cls, object_type: str, snapshot: dict, resolvers: "ResolverRegistry") -> "ObjectReference":
        """Reference to a host object given the host's description of it."""
        return resolvers.reference_from_snapshot(object_type, snapshot)

    def exists(self, resolvers: "ResolverRegistry") -> bool:
        return resolvers.exists(self)

    def resolve(self, resolvers: "ResolverRegistry") -> Optional[Any]:
        """Load the live object, or None if it no longer exists."""
        return resolvers.resolve(self)

    def display_tag(self, resolvers: "ResolverRegistry") -> DisplayTag:
        return resolvers.display_tag(self)

    def __str__(self) -> str:
        return self.name or f"{self.type} {self.key}"
