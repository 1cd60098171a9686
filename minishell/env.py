"""The shell's environment: an ordered mapping of variables."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


def _is_alpha(char: str) -> bool:
    return ("a" <= char <= "z") or ("A" <= char <= "Z")


def _is_alnum(char: str) -> bool:
    return _is_alpha(char) or ("0" <= char <= "9")


def is_valid_identifier(name: str) -> bool:
    """Tell whether ``name`` (up to an optional ``=``) is a valid variable name."""
    if not name or not (_is_alpha(name[0]) or name[0] == "_"):
        return False
    key = name.split("=", 1)[0]
    return all(_is_alnum(c) or c == "_" for c in key[1:])


def join_path(directory: str, name: str) -> str:
    """Join a directory and a name with exactly one separating slash."""
    if directory.endswith("/"):
        return directory + name
    return f"{directory}/{name}"


class Environment:
    """Ordered shell variables.

    A variable may exist without a value (``export NAME``); its value is then
    None.
    """

    def __init__(self) -> None:
        self._vars: dict[str, str | None] = {}

    @classmethod
    def from_strings(cls, entries: Iterable[str]) -> "Environment":
        """Build an environment from ``KEY=VALUE`` strings."""
        env = cls()
        for entry in entries:
            env.add(entry)
        return env

    def add(self, entry: str) -> None:
        """Append a ``KEY=VALUE`` or bare ``KEY`` entry.

        If the key is already present the existing entry is kept, since
        lookups always find the first one.
        """
        key, sep, value = entry.partition("=")
        if key not in self._vars:
            self._vars[key] = value if sep else None

    def get(self, key: str) -> str | None:
        """Return the value of ``key``, or None when unset or valueless."""
        return self._vars.get(key)

    def update(self, key: str, value: str | None) -> bool:
        """Change the value of an existing variable; return whether it existed."""
        if key not in self._vars:
            return False
        self._vars[key] = value
        return True

    def set(self, key: str, value: str | None) -> None:
        """Set ``key`` to ``value``, appending it if it is new."""
        self._vars[key] = value

    def remove(self, key: str) -> bool:
        """Remove ``key``; return whether it was present."""
        return self._vars.pop(key, _MISSING) is not _MISSING

    def sort(self) -> None:
        """Reorder the variables by key."""
        self._vars = dict(sorted(self._vars.items(), key=lambda kv: kv[0]))

    def items(self) -> Iterator[tuple[str, str | None]]:
        """Iterate over ``(key, value)`` pairs in order."""
        return iter(list(self._vars.items()))

    def to_envp(self) -> list[str]:
        """Render as ``KEY=VALUE`` strings for a child process."""
        return [f"{key}={value if value is not None else ''}" for key, value in self._vars.items()]

    def __contains__(self, key: object) -> bool:
        return key in self._vars

    def __len__(self) -> int:
        return len(self._vars)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._vars))

    def __repr__(self) -> str:
        return f"Environment({self._vars!r})"


_MISSING = object()