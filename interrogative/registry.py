"""Question registries for types and instances.

A `TypeRegistry` holds the questions declared on one class and merges in
the questions of its bases. An `InstanceRegistry` holds questions declared
on one object and merges in its class's questions. Both implement the
`QuestionRegistry` interface.

Registries are attached in one of two ways:
- Hosts inheriting `Interrogative` get a `questions` descriptor that
  yields the class registry on the class and the instance registry on an
  instance. Both are stored on the host itself.
- Hosts that cannot inherit the mixin use `type_questions(cls)` and
  `instance_questions(obj)`. Type registries then live in a weak side
  table keyed by the class; instance registries live in the instance's
  `__dict__`, or in a side table keyed by identity for slotted objects.

Declarations are expected during type/object initialisation; concurrent
declaration on one registry must be synchronised by the caller.
"""

from __future__ import annotations

import logging
import weakref
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional

from interrogative.question import OptionsResolver, Question


logger = logging.getLogger(__name__)

Postprocessor = Callable[[Question], Any]

_TYPE_ATTR = "_interrogative_type_registry"
_INSTANCE_ATTR = "_interrogative_registry"

# Side table for classes that do not inherit the mixin
_TYPE_TABLE: "weakref.WeakKeyDictionary[type, TypeRegistry]" = weakref.WeakKeyDictionary()
# Instance registries for objects without __dict__, keyed by id()
_INSTANCE_TABLE: Dict[int, "InstanceRegistry"] = {}


def _union(*groups: Iterable[Question]) -> List[Question]:
    """Concatenate groups keeping first-seen order and dropping repeats of the same object."""
    seen: set[int] = set()
    merged: List[Question] = []
    for group in groups:
        for q in group:
            if id(q) in seen:
                continue
            seen.add(id(q))
            merged.append(q)
    return merged


class QuestionRegistry(ABC):
    """Questions and postprocessors declared at one scope."""

    def __init__(self, owner: Any, weak: bool = False) -> None:
        # Side-table registries hold their owner weakly so the table never
        # keeps it alive; questions declared here share that reference.
        self._owner: Any = weakref.ref(owner) if weak else owner
        self.declared: List[Question] = []
        self.postprocessors: List[Postprocessor] = []

    @property
    def owner(self) -> Any:
        if isinstance(self._owner, weakref.ReferenceType):
            return self._owner()
        return self._owner

    def declare(
        self,
        name: str,
        text: str,
        attributes: Optional[Mapping[str, Any]] = None,
        resolver: Optional[OptionsResolver] = None,
        **attrs: Any,
    ) -> Question:
        """Give a new question.

        Args:
            name: the name (think `<input name=...>`) of the question.
            text: the text of the question (think `<label>`).
            attributes: additional attributes, e.g. `long` for a long answer
                or `multiple` when several answers are allowed.
            resolver: optional callable returning the allowed answers; it is
                called with the evaluation context.

        The question is appended before postprocessors run, so a failing
        postprocessor propagates while the question stays declared.
        """
        q = Question(name, text, self._owner, attributes, resolver, **attrs)
        self.declared.append(q)
        logger.debug("question_declared scope=%s name=%s", self._scope_label(), q.name)

        for postprocessor in list(self.postprocessors):
            try:
                postprocessor(q)
            except Exception:
                logger.error(
                    "postprocessor_failed scope=%s name=%s",
                    self._scope_label(),
                    q.name,
                    exc_info=True,
                )
                raise
        return q

    def register_postprocessor(self, callback: Postprocessor) -> Postprocessor:
        """Run `callback` on every question declared at this scope from now on.

        Returns the callback so this can be used as a decorator.
        """
        if not callable(callback):
            raise TypeError("postprocessor must be callable")
        self.postprocessors.append(callback)
        logger.debug(
            "postprocessor_registered scope=%s count=%d",
            self._scope_label(),
            len(self.postprocessors),
        )
        return callback

    when_questioned = register_postprocessor

    @abstractmethod
    def inherited_questions(self) -> List[Question]:
        """Questions this scope receives from its parent scope(s)."""

    def effective_questions(self) -> List[Question]:
        """All applicable questions: inherited first, then this scope's own."""
        return _union(self.inherited_questions(), self.declared)

    def find(self, name: str) -> Optional[Question]:
        """Return the most specific effective question called `name`."""
        for q in reversed(self.effective_questions()):
            if q.name == name:
                return q
        return None

    def records(self) -> List[Dict[str, Any]]:
        """Record form of every effective question, resolved against the owner."""
        return [q.to_record(self.owner) for q in self.effective_questions()]

    def __iter__(self) -> Iterator[Question]:
        return iter(self.effective_questions())

    def _scope_label(self) -> str:
        owner = self.owner
        if isinstance(owner, type):
            return owner.__qualname__
        return f"{type(owner).__qualname__}@{id(owner):#x}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._scope_label()}, declared={len(self.declared)})"


class TypeRegistry(QuestionRegistry):
    """Registry attached to a class; inherits from the registries of its bases."""

    def __init__(self, owner: type) -> None:
        if not isinstance(owner, type):
            raise TypeError(f"TypeRegistry owner must be a class, got {owner!r}")
        super().__init__(owner)

    def inherited_questions(self) -> List[Question]:
        groups: List[List[Question]] = []
        for base in self.owner.__bases__:
            parent = lookup_type_registry(base)
            if parent is not None:
                groups.append(parent.effective_questions())
        return _union(*groups)


class InstanceRegistry(QuestionRegistry):
    """Registry attached to one object; inherits from its class's registry."""

    def inherited_questions(self) -> List[Question]:
        parent = lookup_type_registry(type(self.owner))
        if parent is None:
            return []
        return parent.effective_questions()


def has_questions(cls: Any) -> bool:
    """True when `cls` (or one of its ancestors) carries the question capability."""
    if not isinstance(cls, type):
        return False
    if issubclass(cls, Interrogative):
        return True
    return any(k in _TYPE_TABLE for k in cls.__mro__)


def lookup_type_registry(cls: Any) -> Optional[TypeRegistry]:
    """Registry for `cls` if it has the capability, otherwise None."""
    if not has_questions(cls):
        return None
    return type_questions(cls)


def type_questions(cls: type) -> TypeRegistry:
    """Return the registry of `cls`, creating it on first use."""
    if not isinstance(cls, type):
        raise TypeError(f"expected a class, got {cls!r}")
    reg = cls.__dict__.get(_TYPE_ATTR)
    if reg is not None:
        return reg
    if issubclass(cls, Interrogative):
        reg = TypeRegistry(cls)
        setattr(cls, _TYPE_ATTR, reg)
    else:
        reg = _TYPE_TABLE.get(cls)
        if reg is not None:
            return reg
        reg = TypeRegistry(cls)
        _TYPE_TABLE[cls] = reg
    logger.debug("type_registry_created type=%s", cls.__qualname__)
    return reg


def instance_questions(obj: Any) -> InstanceRegistry:
    """Return the registry of `obj`, creating it on first use.

    The registry is kept in the instance's `__dict__` when it has one.
    Otherwise it goes into a side table keyed by the instance's identity
    and is dropped when the instance is collected; such instances must
    support weak references.
    """
    if isinstance(obj, type):
        raise TypeError("use type_questions() for classes")
    try:
        state = vars(obj)
    except TypeError:
        return _side_table_registry(obj)
    reg = state.get(_INSTANCE_ATTR)
    if reg is None:
        reg = InstanceRegistry(obj)
        state[_INSTANCE_ATTR] = reg
        logger.debug("instance_registry_created type=%s", type(obj).__qualname__)
    return reg


def _side_table_registry(obj: Any) -> InstanceRegistry:
    key = id(obj)
    reg = _INSTANCE_TABLE.get(key)
    if reg is not None and reg.owner is obj:
        return reg
    try:
        reg = InstanceRegistry(obj, weak=True)
    except TypeError:
        raise TypeError(
            f"{type(obj).__qualname__} instances have neither __dict__ nor weak "
            "reference support to hold questions"
        ) from None
    _INSTANCE_TABLE[key] = reg
    weakref.finalize(obj, _INSTANCE_TABLE.pop, key, None)
    logger.debug("instance_registry_created type=%s side_table=true", type(obj).__qualname__)
    return reg


class _QuestionsDescriptor:
    def __get__(self, instance: Any, owner: type) -> QuestionRegistry:
        if instance is None:
            return type_questions(owner)
        return instance_questions(instance)


class Interrogative:
    """A mixin for curious classes.

    `Cls.questions` is the class-level registry, shared by all instances and
    inherited by subclasses; `obj.questions` is the registry of one object.
    """

    questions = _QuestionsDescriptor()


__all__ = [
    "QuestionRegistry",
    "TypeRegistry",
    "InstanceRegistry",
    "Interrogative",
    "Postprocessor",
    "has_questions",
    "lookup_type_registry",
    "type_questions",
    "instance_questions",
]
