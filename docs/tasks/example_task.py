from dataclasses import dataclass

from tqdm import tqdm

from dispatch import task_action


@dataclass(frozen=True)
class ExampleTask:
    """
    A task that takes its values as constructor arguments.

    Register it from the build file with positional arguments:

        [tasks.myTask]
        type = "ExampleTask"
        args = ["hello", 42]

    Both values are fixed once the task has been created.
    """

    message: str
    number: int

    def __post_init__(self):
        if not isinstance(self.message, str):
            raise TypeError(f"message must be a string, not {type(self.message).__name__}")
        if isinstance(self.number, bool) or not isinstance(self.number, int):
            raise TypeError(f"number must be an integer, not {type(self.number).__name__}")

    @task_action
    def run(self):
        # tqdm.write holds tqdm's lock, so lines from concurrent runs stay whole
        tqdm.write(f"{self.message} {self.number}")
