from typing import Literal, Protocol

Level = Literal["debug", "info", "success", "warning", "error"]


class Renderer(Protocol):
    """
    Presents one resolved diagnostic. Symbol lines and rename reports are
    written to the output stream directly and never reach a renderer.
    """

    def render(self, message: str, level: Level) -> None: ...
