import inspect
import logging
import pydoc
from collections.abc import Iterable
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

ACTION_MARKER = "__task_action__"


class TaskError(Exception):
    pass


class TaskDefinitionError(TaskError):
    pass


class TaskCreationError(TaskError):
    pass


class UnknownTaskError(TaskError):
    pass


class DuplicateTaskError(TaskCreationError):
    pass


def camel_to_snake(camel_case_str):
    snake_case_str = ""
    for char in camel_case_str:
        if char.isupper():
            snake_case_str += "_" + char.lower()
        else:
            snake_case_str += char
    # Remove leading underscore, if any
    snake_case_str = snake_case_str.lstrip("_")
    return snake_case_str


def dispatch(py_files: Iterable[str | Path]) -> list[dict[str, Any]]:
    tasks = []

    for file in py_files:
        mod = pydoc.importfile(str(file))
        for info in inspect.getmembers(mod, inspect.isclass):
            name = info[0]
            class_ = info[1]
            if not name.endswith("Task") or class_.__module__ != mod.__name__:
                continue
            name_slug = camel_to_snake(name[:-4])
            logger.debug("Found task %s (%s) in %s", name, name_slug, file)
            tasks.append({"name": name, "name_slug": name_slug, "class": class_})

    return tasks


def task_action(func):
    """
    Marks the method that is run when the task is executed.
    """
    setattr(func, ACTION_MARKER, True)
    return func


def find_action(task):
    marked = [
        name
        for name, member in inspect.getmembers(type(task), inspect.isfunction)
        if getattr(member, ACTION_MARKER, False)
    ]
    if len(marked) > 1:
        raise TaskDefinitionError(
            f"{type(task).__name__} marks more than one task action: {', '.join(marked)}"
        )
    if marked:
        return getattr(task, marked[0])
    run = getattr(task, "run", None)
    if callable(run):
        return run
    raise TaskDefinitionError(f"{type(task).__name__} has no task action")


class TaskContainer:
    """
    Holds task types that can be created by name and the task instances created from them.

    Constructor arguments are bound by position, exactly as they are given to `create`.
    """

    def __init__(self):
        self._types = {}
        self._tasks = {}

    def register_type(self, class_):
        name = class_.__name__
        keys = [name]
        if name.endswith("Task"):
            keys.append(camel_to_snake(name[:-4]))
        # A later class replaces an earlier one under every key it owns
        for key in keys:
            existing = self._types.get(key)
            if existing is not None and existing is not class_:
                logger.warning(
                    "Task type '%s' from %s replaces the one from %s",
                    key,
                    class_.__module__,
                    existing.__module__,
                )
            self._types[key] = class_

    def _resolve_type(self, task_type):
        if isinstance(task_type, type):
            return task_type
        try:
            return self._types[task_type]
        except KeyError:
            raise UnknownTaskError(f"Unknown task type '{task_type}'") from None

    def create(self, name, task_type, *args):
        if not name:
            raise TaskCreationError("Task name must not be empty")
        if name in self._tasks:
            raise DuplicateTaskError(f"Task '{name}' already exists")

        class_ = self._resolve_type(task_type)
        try:
            inspect.signature(class_).bind(*args)
        except TypeError as e:
            raise TaskCreationError(f"Could not create task '{name}': {e}") from e

        try:
            task = class_(*args)
        except (TypeError, ValueError) as e:
            raise TaskCreationError(f"Could not create task '{name}': {e}") from e

        logger.debug("Created task %s = %s%r", name, class_.__name__, args)
        self._tasks[name] = task
        return task

    def get(self, name):
        try:
            return self._tasks[name]
        except KeyError:
            raise UnknownTaskError(f"Unknown task '{name}'") from None

    def names(self):
        return list(self._tasks)

    def execute(self, name):
        action = find_action(self.get(name))
        logger.info("Running task %s", name)
        action()

    def __contains__(self, name):
        return name in self._tasks

    def __len__(self):
        return len(self._tasks)
