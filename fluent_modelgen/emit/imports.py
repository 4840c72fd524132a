"""Import bookkeeping for one generated module.

Every name the emitted code refers to is bound through an ImportBuilder,
which picks a local name (aliasing on clashes) and renders the import
block in sorted, stable order.
"""

from __future__ import annotations

import builtins

from fluent_modelgen.model.types import TypeRef

_BUILTIN_NAMES = frozenset(dir(builtins))


def split_qualified(qualified: str) -> tuple[str, str]:
    """``a.b.C`` -> ``("a.b", "C")``."""
    module, _, name = qualified.rpartition(".")
    return module, name


class ImportBuilder:
    """Collects ``from module import name`` statements.

    Names needed at runtime and names needed only by annotations are kept
    apart; the latter are rendered under ``if TYPE_CHECKING:``.
    """

    def __init__(self, reserved: set[str] | None = None) -> None:
        self._reserved = set(reserved or ())
        self._locals: dict[str, str] = {}  # qualified -> local
        self._taken: dict[str, str] = {}  # local -> qualified
        self._runtime: set[str] = set()
        self._type_checking: set[str] = set()

    def reserve(self, name: str) -> None:
        """Keep ``name`` free for a class defined in the module itself."""
        self._reserved.add(name)

    def runtime(self, qualified: str) -> str:
        """Bind ``qualified`` for use at runtime; returns the local name."""
        local = self._bind(qualified)
        self._runtime.add(qualified)
        return local

    def type_only(self, qualified: str) -> str:
        """Bind ``qualified`` for annotations only; returns the local name."""
        local = self._bind(qualified)
        self._type_checking.add(qualified)
        return local

    def statement(self, qualified: str) -> str:
        """The import statement binding ``qualified`` under its local name."""
        module, name = split_qualified(qualified)
        local = self._bind(qualified)
        if local == name:
            return f"from {module} import {name}"
        return f"from {module} import {name} as {local}"

    def annotation(self, type_ref: TypeRef | None) -> str:
        """Annotation text for a declared type, binding what it needs."""
        if type_ref is None:
            return self.runtime("typing.Any")
        if "." in type_ref.name:
            head = self.type_only(type_ref.name)
        elif type_ref.name in _BUILTIN_NAMES or type_ref.name == "None":
            head = type_ref.name
        else:
            # Unresolvable bare names (unbound type variables, star imports).
            return self.runtime("typing.Any")
        if not type_ref.args:
            return head
        return f"{head}[{', '.join(self._arg(arg) for arg in type_ref.args)}]"

    def _arg(self, type_ref: TypeRef) -> str:
        if type_ref.name == "...":
            return "..."
        return self.annotation(type_ref)

    def _bind(self, qualified: str) -> str:
        local = self._locals.get(qualified)
        if local is not None:
            return local
        module, name = split_qualified(qualified)
        if not module:
            raise ValueError(f"Cannot import unqualified name '{qualified}'")
        local = name
        index = 1
        while local in self._reserved or local in self._taken:
            local = f"{name}_{index}"
            index += 1
        self._locals[qualified] = local
        self._taken[local] = qualified
        return local

    def render(self) -> list[str]:
        """Import lines: runtime imports, then the TYPE_CHECKING block."""
        # Runtime bindings already serve annotations.
        typed = self._type_checking - self._runtime
        guard = self.runtime("typing.TYPE_CHECKING") if typed else None
        lines = self._lines(self._runtime)
        if typed:
            lines.append("")
            lines.append(f"if {guard}:")
            lines.extend(f"    {line}" for line in self._lines(typed))
        return lines

    def _lines(self, qualified_names: set[str]) -> list[str]:
        by_module: dict[str, list[str]] = {}
        for qualified in qualified_names:
            module, name = split_qualified(qualified)
            local = self._locals[qualified]
            entry = name if local == name else f"{name} as {local}"
            by_module.setdefault(module, []).append(entry)
        return [
            f"from {module} import {', '.join(sorted(entries))}"
            for module, entries in sorted(by_module.items())
        ]
