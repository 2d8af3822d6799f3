"""Base class for the nodes of a component/property tree.

Every node has a "master", the node that owns it: the component holding a
property, or the parent of a sub-component. A node without an owner is its
own master. When a node is modified it is marked invalid along with every
master above it, meaning that the original source lines can no longer be
replayed verbatim and the tree must be rendered from its parsed objects.

The master is held through a weak reference so that child nodes do not keep
their owner alive.
"""

from __future__ import annotations

import weakref


class VObject:
    """A node in a component/property tree that tracks its validity."""

    def __init__(self, master: VObject | None = None) -> None:
        """Initialize VObject, optionally attached to a master."""
        self._valid = True
        self._master_ref: weakref.ReferenceType[VObject] | None = None
        if master is not None and master is not self:
            self._master_ref = weakref.ref(master)

    @property
    def master(self) -> VObject:
        """Return the owner of this object, or the object itself."""
        if self._master_ref is not None and (master := self._master_ref()) is not None:
            return master
        return self

    @master.setter
    def master(self, master: VObject | None) -> None:
        """Attach this object to a new master."""
        if master is None or master is self:
            self._master_ref = None
        else:
            self._master_ref = weakref.ref(master)

    def is_valid(self) -> bool:
        """Return True if the object was not modified since it was parsed."""
        return self._valid

    def invalidate(self) -> None:
        """Mark this object and its masters as modified."""
        if (master := self.master) is not self and master._valid:
            master.invalidate()
        self._valid = False
