from typing import Any, Iterable

from gameagent.function import FunctionRegistry, GameFunction


class GameWorker:
    """A named location on the agent's map, owning the functions it can run."""

    def __init__(
            self,
            id: str,
            name: str,
            description: str,
            functions: Iterable[GameFunction] = (),
    ):
        self.id = id
        self.name = name
        self.description = description
        self.functions = FunctionRegistry(functions)

    def __repr__(self) -> str:
        return f"GameWorker(id={self.id!r}, functions={list(self.functions)!r})"

    def functions_json(self) -> list[dict[str, Any]]:
        return self.functions.to_json()

    def location_json(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "description": self.description}
