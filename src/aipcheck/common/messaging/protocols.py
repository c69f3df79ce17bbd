from typing import Protocol


class Renderer(Protocol):
    """
    Presents a fully resolved message to the user.

    Levels: "debug", "info", "success", "warning", "error".
    """

    def render(self, message: str, level: str) -> None: ...
