"""reqprep scope - variable lookup tables and the global variable store."""

from collections.abc import Iterable, Mapping, Sequence

from reqprep.models import Variable


def merge_scope(
    environment_vars: Sequence[Variable],
    global_vars: Sequence[Variable],
) -> tuple[Variable, ...]:
    """Environment variables followed by global variables.

    Duplicates are kept; shadowing is decided at lookup time.
    """
    return (*environment_vars, *global_vars)


def bindings(scope: Iterable[Variable]) -> dict[str, str]:
    """Flatten a scope into a dict where the first occurrence of a key wins."""
    table: dict[str, str] = {}
    for var in scope:
        table.setdefault(var.key, var.value)
    return table


def variables_from_mapping(mapping: Mapping[str, object]) -> tuple[Variable, ...]:
    return tuple(Variable(str(k), "" if v is None else str(v)) for k, v in mapping.items())


class GlobalVariables:
    """Process-wide variables consulted after the active environment.

    The owning application writes to the store; resolution only ever reads
    a snapshot.
    """

    def __init__(self, variables: Iterable[Variable] = ()):
        self._variables: list[Variable] = list(variables)

    def set(self, variables: Iterable[Variable]) -> None:
        self._variables = list(variables)

    def update(self, variables: Iterable[Variable]) -> None:
        """Add variables, replacing existing ones with the same key."""
        incoming = list(variables)
        keys = {v.key for v in incoming}
        self._variables = [v for v in self._variables if v.key not in keys] + incoming

    def clear(self) -> None:
        self._variables = []

    def snapshot(self) -> tuple[Variable, ...]:
        return tuple(self._variables)


GLOBAL_VARIABLES = GlobalVariables()


def global_variables() -> tuple[Variable, ...]:
    """Snapshot of the default global store."""
    return GLOBAL_VARIABLES.snapshot()
