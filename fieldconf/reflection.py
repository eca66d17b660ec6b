"""Breadth-first traversal over the leaf fields of nested records.

Responsibilities:
- Validate that a traversal root is a mutable record instance.
- Yield leaf fields of nested records in breadth-first, declaration order.
- Apply tri-state inclusion filters and opaque-type overrides.

Key types:
- `FieldNode`: one field position (slot, resolved type, metadata, owner frame).
- `ReflectOptions`: inclusion filters and the opaque-type override set.
- `FieldSequence`: restartable iterable returned by `reflect_fields_of`.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Iterator, Mapping

from .errors import ConfigError, ExpectPointerError, ExpectStructError, ShapeError
from .kinds import Kind, kind_of, new_record, record_hints
from .tags import TagOptions, parse_tag_options


@dataclass(eq=False, slots=True)
class FieldNode:
    """One position inside a record graph.

    Attributes:
        name: Attribute name of the field (empty for the root frame).
        type: Resolved type hint of the field.
        field: Dataclass field carrying the metadata (`None` for the root frame).
        holder: Instance owning the slot (the record itself for the root frame).
        owner: Frame node containing this field, used only to rebuild paths.
    """

    name: str
    type: Any
    field: dataclasses.Field | None
    holder: Any
    owner: FieldNode | None = None

    def get(self) -> Any:
        """Return the current value of the slot."""

        if self.field is None:
            return self.holder
        return getattr(self.holder, self.name)

    def set(self, value: Any) -> None:
        """Store `value` in the slot."""

        setattr(self.holder, self.name, value)

    @property
    def metadata(self) -> Mapping[str, Any]:
        """Raw field metadata (empty for the root frame)."""

        if self.field is None:
            return {}
        return self.field.metadata

    @property
    def options(self) -> TagOptions:
        """Parsed field metadata."""

        return parse_tag_options(self.metadata)

    @property
    def path(self) -> str:
        """Dotted attribute path from the root record."""

        names = []
        node: FieldNode | None = self
        while node is not None and node.field is not None:
            names.append(node.name)
            node = node.owner
        return ".".join(reversed(names))

    def chain(self) -> Iterator[FieldNode]:
        """Yield this node and then each owner up to (excluding) the root frame."""

        node: FieldNode | None = self
        while node is not None and node.field is not None:
            yield node
            node = node.owner

    @property
    def can_addr(self) -> bool:
        """Whether the owning instance can be written through."""

        return not _is_frozen(self.holder)

    @property
    def can_interface(self) -> bool:
        """Whether the field is public."""

        return not self.name.startswith("_")

    @property
    def can_set(self) -> bool:
        """Whether the slot may be assigned."""

        return self.can_addr and self.can_interface


@dataclass(frozen=True, slots=True)
class ReflectOptions:
    """Filters applied while reflecting over record fields.

    Each predicate is tri-state: `None` leaves it unchecked, `True`/`False`
    require the field's predicate to be equal.

    Attributes:
        can_addr: Filter on `FieldNode.can_addr`.
        can_set: Filter on `FieldNode.can_set`.
        can_interface: Filter on `FieldNode.can_interface`.
        as_field: Record types yielded as opaque leaves instead of being descended into.
        materialize: Store a zero record in settable `None` record slots before
            descending. Otherwise such slots are walked through a detached zero
            record and the destination is left untouched.
    """

    can_addr: bool | None = None
    can_set: bool | None = None
    can_interface: bool | None = None
    as_field: tuple[Any, ...] = ()
    materialize: bool = False

    def is_valid(self, node: FieldNode) -> bool:
        """Return whether `node` passes every configured filter."""

        if self.can_set is not None and node.can_set != self.can_set:
            return False
        if self.can_addr is not None and node.can_addr != self.can_addr:
            return False
        if self.can_interface is not None and node.can_interface != self.can_interface:
            return False
        return True

    def is_field(self, node: FieldNode) -> bool:
        """Return whether `node` is yielded as a leaf rather than descended into."""

        if any(node.type == opaque for opaque in self.as_field):
            return True
        return kind_of(node.type) is not Kind.RECORD


class FieldSequence:
    """Restartable iterable of `(node, error)` pairs over a record's leaf fields.

    Every call to `iter()` starts a fresh traversal. A malformed root produces
    exactly one `(None, error)` pair.
    """

    def __init__(self, dest: Any, options: ReflectOptions) -> None:
        """Store the traversal root and filters."""

        self._dest = dest
        self._options = options

    def __iter__(self) -> Iterator[tuple[FieldNode | None, ConfigError | None]]:
        try:
            ensure_record(self._dest)
        except ShapeError as exc:
            yield None, exc
            return

        root = FieldNode(name="", type=type(self._dest), field=None, holder=self._dest)
        frames = [(root, self._dest)]
        index = 0
        while index < len(frames):
            frame, record = frames[index]
            index += 1
            hints = record_hints(type(record))
            for item in dataclasses.fields(record):
                node = FieldNode(
                    name=item.name,
                    type=hints[item.name],
                    field=item,
                    holder=record,
                    owner=frame,
                )
                if not self._options.is_valid(node):
                    continue

                if not self._options.is_field(node):
                    nested = node.get()
                    if nested is None:
                        nested = new_record(node.type)
                        if self._options.materialize:
                            if not node.can_set:
                                continue
                            node.set(nested)
                    frames.append((node, nested))
                    continue

                yield node, None


def reflect_fields_of(dest: Any, options: ReflectOptions | None = None) -> FieldSequence:
    """Return a restartable breadth-first sequence over the leaf fields of `dest`.

    Args:
        dest: Mutable record instance to traverse.
        options: Inclusion filters; no filtering when omitted.
    """

    return FieldSequence(dest, options if options is not None else ReflectOptions())


def ensure_record(dest: Any) -> None:
    """Validate that `dest` is a mutable record instance.

    Raises:
        ExpectPointerError: If `dest` cannot be mutated in place.
        ExpectStructError: If `dest` is mutable but not a record.
    """

    if dataclasses.is_dataclass(dest):
        if isinstance(dest, type) or _is_frozen(dest):
            raise ExpectPointerError("struct")
        return

    if dest is None:
        raise ExpectPointerError("none")
    if isinstance(dest, _IMMUTABLE_TYPES):
        raise ExpectPointerError(type(dest).__name__)
    raise ExpectStructError(type(dest).__name__)


_IMMUTABLE_TYPES = (bool, int, float, complex, str, bytes, tuple, frozenset, range, type)


def _is_frozen(instance: Any) -> bool:
    """Return whether `instance` is a frozen dataclass."""

    params = getattr(type(instance), "__dataclass_params__", None)
    return bool(params is not None and params.frozen)
