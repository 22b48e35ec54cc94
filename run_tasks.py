import warnings

from tqdm import TqdmExperimentalWarning

warnings.filterwarnings("ignore", category=TqdmExperimentalWarning)

import logging
import tomllib
from pathlib import Path
from typing import Any

import typer
from pydantic import BaseModel, ValidationError
from rich.console import Console
from tqdm.rich import tqdm

from dispatch import TaskContainer, TaskError, dispatch

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, help="Create and run tasks declared in a build file")


class BuildFileError(TaskError):
    pass


class TaskDeclaration(BaseModel):
    type: str
    args: list[Any] = []


class BuildFile(BaseModel):
    tasks_dir: str = "."
    tasks: dict[str, TaskDeclaration] = {}


def load_build_file(path: Path) -> BuildFile:
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise BuildFileError(f"Could not read build file {path}: {e}") from e

    try:
        return BuildFile.model_validate(raw)
    except ValidationError as e:
        raise BuildFileError(f"Invalid build file {path}:\n{e}") from e


def configure(build: BuildFile, base_dir: Path) -> TaskContainer:
    """
    Discovers the task classes below the build file's task directory and
    creates every declared task, in the order the build file lists them.
    """
    tasks_dir = base_dir / build.tasks_dir
    if not tasks_dir.is_dir():
        raise BuildFileError(f"Task directory {tasks_dir} does not exist")

    container = TaskContainer()
    for info in dispatch(sorted(tasks_dir.rglob("*.py"))):
        container.register_type(info["class"])

    for name, decl in build.tasks.items():
        container.create(name, decl.type, *decl.args)

    return container


def _load(build_file: Path) -> tuple[BuildFile, TaskContainer]:
    build = load_build_file(build_file)
    return build, configure(build, build_file.resolve().parent)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def run(
    build_file: Path = typer.Argument(..., help="Path to the build file"),
    names: list[str] | None = typer.Argument(None, help="Tasks to run (default: all)"),
    progress: bool = typer.Option(True, help="Show a progress bar"),
) -> None:
    """Run tasks in declaration order."""
    try:
        _, container = _load(build_file)
        selected = names or container.names()
        # stdout carries only task output; the bar goes to stderr
        bar = tqdm(
            selected,
            desc="Running tasks",
            unit="task",
            disable=not progress,
            options={"console": Console(stderr=True)},
        )
        for name in bar:
            container.execute(name)
    except TaskError as e:
        logger.error("%s", e)
        raise typer.Exit(code=1)


@app.command("list")
def list_tasks(build_file: Path = typer.Argument(..., help="Path to the build file")) -> None:
    """List the declared tasks."""
    try:
        build, _ = _load(build_file)
    except TaskError as e:
        logger.error("%s", e)
        raise typer.Exit(code=1)

    for name, decl in build.tasks.items():
        typer.echo(f"{name}\t{decl.type}\t{decl.args}")


if __name__ == "__main__":
    app()
