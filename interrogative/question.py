"""Question value and options resolution.

A question is a named piece of information to request from a user: a name
(think `<input name=...>`), a text (think `<label>`), free-form attributes
such as `long` or `multiple`, and optionally a set of allowed answers.

Options are computed lazily. A question either carries an explicit
resolver, or defers to its evaluation context: an object implementing
`OptionsProvider`, or (when the by-name convention is enabled) an object
exposing a zero-argument callable named `<name>_options`.
"""

from __future__ import annotations

import copy
import inspect
import json
import logging
import weakref
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, runtime_checkable

import yaml

from interrogative.config import get_config
from interrogative.exceptions import InvalidQuestionError


logger = logging.getLogger(__name__)

OptionsResolver = Callable[[Any], Any]


@runtime_checkable
class OptionsProvider(Protocol):
    """Capability for contexts that supply options for questions by name.

    Return None for a question without an options concept.
    """

    def question_options(self, name: str) -> Any: ...


def _capability(target: Any, attr: str) -> Optional[Callable[..., Any]]:
    """Return `target.attr` if it can be called on `target` as-is.

    On a class, plain instance methods do not count: only class and static
    methods (or other callables stored on the class) are usable.
    """
    if isinstance(target, type):
        raw = inspect.getattr_static(target, attr, None)
        if raw is None or inspect.isfunction(raw):
            return None
    method = getattr(target, attr, None)
    return method if callable(method) else None


def _require_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidQuestionError(field)
    return value


class Question:
    """A question with a unique name and a textual representation.

    Designed to translate well into a form element without betraying that
    it is meant to become one. Equality and hashing are by identity.

    `owner` may be given as a `weakref.ref`, in which case the question does
    not keep its owner alive.
    """

    __slots__ = ("_name", "_text", "_owner", "_resolver", "_bound_context", "attributes")

    def __init__(
        self,
        name: str,
        text: str,
        owner: Any = None,
        attributes: Optional[Mapping[str, Any]] = None,
        resolver: Optional[OptionsResolver] = None,
        **attrs: Any,
    ) -> None:
        self._name = _require_text("name", name)
        self._text = _require_text("text", text)
        if resolver is not None and not callable(resolver):
            raise TypeError("resolver must be callable")
        self._owner = owner
        self._resolver = resolver
        self._bound_context: Any = None
        merged: Dict[str, Any] = dict(attributes or {})
        merged.update(attrs)
        self.attributes: Dict[str, Any] = merged

    @property
    def name(self) -> str:
        return self._name

    @property
    def text(self) -> str:
        return self._text

    @property
    def owner(self) -> Any:
        # A weakly held owner yields None once it has been collected
        if isinstance(self._owner, weakref.ReferenceType):
            return self._owner()
        return self._owner

    @property
    def resolver(self) -> Optional[OptionsResolver]:
        return self._resolver

    @property
    def bound_context(self) -> Any:
        return self._bound_context

    def __repr__(self) -> str:
        return f"Question(name={self._name!r}, text={self._text!r})"

    def __copy__(self) -> "Question":
        clone = Question.__new__(Question)
        for slot in Question.__slots__:
            setattr(clone, slot, getattr(self, slot))
        return clone

    def options(self, context: Any = None) -> Any:
        """Possible answers for the question.

        Options should be either a sequence or a mapping of `{text: value}`.
        The resolver, if any, is called with `context`, falling back to the
        bound instance and finally to None. Without a resolver the evaluation
        context (explicit, else the bound instance) is probed first and the
        owner second; the first one offering `question_options` or a
        `<name>_options` callable answers. Returns None when the question
        has no options concept at all.
        """
        ctx = context if context is not None else self._bound_context
        if self._resolver is not None:
            return self._resolver(ctx)

        owner = self.owner
        targets = [t for t in (ctx, owner) if t is not None]
        if len(targets) == 2 and targets[0] is targets[1]:
            targets.pop()

        cfg = get_config()
        for target in targets:
            provider = _capability(target, "question_options")
            if provider is not None:
                return provider(self._name)
            if not cfg.convention_lookup:
                continue
            method = _capability(target, f"{self._name}{cfg.options_suffix}")
            if method is not None:
                logger.debug("options_by_convention name=%s suffix=%s", self._name, cfg.options_suffix)
                return method()
        return None

    def has_options(self, context: Any = None) -> bool:
        return self.options(context) is not None

    def for_instance(self, instance: Any) -> "Question":
        """Return an independent copy bound to `instance`.

        Attributes are deep-copied so that mutating the copy never touches
        the original.
        """
        clone = copy.copy(self)
        clone.attributes = copy.deepcopy(self.attributes)
        clone._bound_context = instance
        return clone

    def to_record(self, context: Any = None) -> Dict[str, Any]:
        """Return a flat mapping representation of the question.

        Attributes are merged into the top level, along with `text` and
        `name`, which always win over same-named attributes. Options are
        nested under `options` and the key is omitted when there are none.
        """
        record: Dict[str, Any] = dict(self.attributes)
        record["text"] = self._text
        record["name"] = self._name
        opts = self.options(context)
        if opts is not None:
            record["options"] = opts
        return record

    def to_json(self, context: Any = None, **kwargs: Any) -> str:
        kwargs.setdefault("indent", get_config().json_indent)
        return json.dumps(self.to_record(context), **kwargs)

    def to_yaml(self, context: Any = None) -> str:
        return yaml.safe_dump(self.to_record(context), sort_keys=False)


__all__ = ["Question", "OptionsProvider", "OptionsResolver"]
