"""Interrogative: declare the questions a type wants answered.

Classes declare questions at the class level (shared by instances and
inherited by subclasses) and objects may add their own. The package only
describes questions; rendering, persistence and answer validation belong to
the host application.
"""

from __future__ import annotations

from interrogative.config import InterrogativeConfig, get_config, load_config, reset_config
from interrogative.exceptions import InterrogativeError, InvalidQuestionError
from interrogative.logging_setup import configure_logging
from interrogative.question import OptionsProvider, Question
from interrogative.registry import (
    InstanceRegistry,
    Interrogative,
    QuestionRegistry,
    TypeRegistry,
    has_questions,
    instance_questions,
    type_questions,
)

__version__ = "0.1.0"

__all__ = [
    "Interrogative",
    "Question",
    "OptionsProvider",
    "QuestionRegistry",
    "TypeRegistry",
    "InstanceRegistry",
    "type_questions",
    "instance_questions",
    "has_questions",
    "InterrogativeError",
    "InvalidQuestionError",
    "InterrogativeConfig",
    "load_config",
    "get_config",
    "reset_config",
    "configure_logging",
]
