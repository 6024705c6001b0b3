"""
Resolver Registry

Looks up the resolver for an object reference's type. Unknown types and
missing objects are not errors: they degrade to "doesn't exist" and a plain
span carrying the captured name.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from logify.app.repositories.object_catalog import IObjectCatalog
from logify.app.resolvers.base import ObjectResolver, Snapshot
from logify.app.resolvers.comment_resolver import CommentResolver
from logify.app.resolvers.core_resolver import CoreResolver
from logify.app.resolvers.option_resolver import OptionResolver
from logify.app.resolvers.plugin_resolver import PluginResolver
from logify.app.resolvers.post_resolver import PostResolver
from logify.app.resolvers.term_resolver import TermResolver
from logify.app.resolvers.theme_resolver import ThemeResolver
from logify.app.resolvers.user_resolver import UserResolver
from logify.app.resolvers.widget_resolver import WidgetResolver
from logify.domain.object_reference import DisplayTag, ObjectReference
from logify.domain.property_set import Property

logger = logging.getLogger(__name__)

RESOLVER_CLASSES = (
    PostResolver,
    UserResolver,
    TermResolver,
    OptionResolver,
    PluginResolver,
    ThemeResolver,
    CommentResolver,
    WidgetResolver,
    CoreResolver,
)


class ResolverRegistry:
    def __init__(self, catalog: IObjectCatalog, resolvers: Optional[Iterable[ObjectResolver]] = None):
        self.catalog = catalog
        self._resolvers: Dict[str, ObjectResolver] = {}
        if resolvers is None:
            resolvers = [resolver_class(catalog) for resolver_class in RESOLVER_CLASSES]
        for resolver in resolvers:
            self.register(resolver)

    def register(self, resolver: ObjectResolver) -> None:
        self._resolvers[resolver.object_type] = resolver

    def get(self, object_type: Optional[str]) -> Optional[ObjectResolver]:
        if object_type is None:
            return None
        resolver = self._resolvers.get(object_type)
        if resolver is None:
            logger.debug(f"No resolver for object type {object_type!r}")
        return resolver

    def types(self) -> List[str]:
        return list(self._resolvers.keys())

    def exists(self, ref: ObjectReference) -> bool:
        resolver = self.get(ref.type)
        return resolver.exists(ref.key) if resolver else False

    def resolve(self, ref: ObjectReference) -> Optional[Any]:
        resolver = self.get(ref.type)
        return resolver.load(ref.key) if resolver else None

    def name_of(self, ref: ObjectReference) -> Optional[str]:
        """Live name if the object exists, else the captured one"""
        resolver = self.get(ref.type)
        live_name = resolver.get_name(ref.key) if resolver else None
        return live_name or ref.name

    def subtype_of(self, ref: ObjectReference) -> Optional[str]:
        resolver = self.get(ref.type)
        return resolver.get_subtype(ref.key) if resolver else None

    def core_properties(self, ref: ObjectReference) -> Optional[List[Property]]:
        resolver = self.get(ref.type)
        return resolver.get_core_properties(ref.key) if resolver else None

    def display_tag(self, ref: ObjectReference) -> DisplayTag:
        resolver = self.get(ref.type)
        if resolver is None:
            return DisplayTag.span(str(ref))
        return resolver.get_tag(ref.key, ref.name)

    def reference_from_snapshot(self, object_type: str, snapshot: Snapshot) -> ObjectReference:
        """Reference to an object as described by a host snapshot"""
        resolver = self.get(object_type)
        if resolver is None:
            return ObjectReference(type=object_type)
        return resolver.reference(snapshot)

    def complete(self, ref: ObjectReference) -> ObjectReference:
        """Fill in a missing name from the live object"""
        if ref.name is not None:
            return ref
        name = self.name_of(ref)
        if name is None:
            return ref
        return ObjectReference(type=ref.type, key=ref.key, name=name)
