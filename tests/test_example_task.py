import dataclasses
import threading

import pytest


@pytest.mark.parametrize(
    "message,number,expected",
    [
        ("hello", 42, "hello 42\n"),
        ("", 0, " 0\n"),
        ("x y", -5, "x y -5\n"),
    ],
)
def test_run_prints_message_and_number(example_task_class, capsys, message, number, expected):
    example_task_class(message, number).run()
    assert capsys.readouterr().out == expected


def test_run_is_repeatable(example_task_class, capsys):
    task = example_task_class("hello", 42)
    task.run()
    task.run()
    assert capsys.readouterr().out == "hello 42\nhello 42\n"
    assert task.message == "hello"
    assert task.number == 42


def test_fields_are_immutable(example_task_class):
    task = example_task_class("hello", 42)
    with pytest.raises(dataclasses.FrozenInstanceError):
        task.message = "bye"
    with pytest.raises(dataclasses.FrozenInstanceError):
        task.number = 1


def test_both_arguments_required(example_task_class):
    with pytest.raises(TypeError):
        example_task_class("hello")


@pytest.mark.parametrize("message,number", [(42, 42), ("hello", "42"), ("hello", True), (None, 1)])
def test_rejects_wrong_types(example_task_class, message, number):
    with pytest.raises(TypeError):
        example_task_class(message, number)


def test_concurrent_runs_do_not_interleave(example_task_class, capsys):
    task = example_task_class("x y", 7)
    threads = [threading.Thread(target=task.run) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = capsys.readouterr().out.splitlines()
    assert lines == ["x y 7"] * 16
