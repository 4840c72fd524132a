"""In-memory filer for tests and embedding hosts."""

from __future__ import annotations

from fluent_modelgen.core.exceptions import FilerError


class MemoryFiler:
    """Filer that keeps generated modules in a dict."""

    def __init__(self) -> None:
        self.sources: dict[str, str] = {}

    def create_source(self, module: str, text: str) -> None:
        if module in self.sources:
            raise FilerError(module, "module already written in this batch")
        self.sources[module] = text

    def __getitem__(self, module: str) -> str:
        return self.sources[module]

    def __contains__(self, module: object) -> bool:
        return module in self.sources

    def __len__(self) -> int:
        return len(self.sources)
