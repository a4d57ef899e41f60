##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
The `Realm` tree.

Every plugin registration creates a realm whose parent is the realm that registered
the plugin. A realm holds a weak reference to its parent (it does not own it), an
ordered list of children, an optional base `path` for relative file references, and
a `plugins` namespace where plugins keep realm-scoped state.
"""

import weakref
from typing import Any, Dict, Iterator, List, Optional


class Realm:
    """
    A node in the plugin hierarchy.

    Realms are compared and hashed by identity and are never reparented.

    Attributes:
        name (str): A human-readable name, usually the plugin's name.
        children (List[Realm]): Child realms, in registration order.
        path (str): Base directory for relative paths contributed at this realm.
        plugins (Dict[str, Any]): Realm-scoped state, keyed by plugin.
    """

    def __init__(self, name: str, parent: Optional["Realm"] = None):
        self.name: str = name
        self._parent = weakref.ref(parent) if parent is not None else None
        self.children: List["Realm"] = []
        self.path: Optional[str] = None
        self.plugins: Dict[str, Any] = {}
        if parent is not None:
            parent.children.append(self)

    @property
    def parent(self) -> Optional["Realm"]:
        """The parent realm, or None for the root."""
        return self._parent() if self._parent is not None else None

    @property
    def is_root(self) -> bool:
        """True if the realm has no parent."""
        return self._parent is None

    @property
    def root(self) -> "Realm":
        """The root of the tree this realm belongs to."""
        realm = self
        while realm.parent is not None:
            realm = realm.parent
        return realm

    def lineage(self) -> Iterator["Realm"]:
        """
        Walk from this realm up to the root.

        Yields:
            This realm, then each ancestor in turn.
        """
        realm = self
        while realm is not None:
            yield realm
            realm = realm.parent

    def descendants(self) -> Iterator["Realm"]:
        """
        Walk the subtree below this realm, depth first in registration order.

        Yields:
            Each descendant realm.
        """
        for child in self.children:
            yield child
            yield from child.descendants()

    def __repr__(self) -> str:
        return f"<Realm {self.name}>"
