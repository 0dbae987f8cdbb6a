"""AWSL environments — chained lexical scopes plus per-run context."""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TextIO

from .values import Value


@dataclass
class RunContext:
    """AWS profile and region active for a run.

    Shared by every scope of one run; `profile "x";` and `region "y";`
    statements update it.
    """

    profile: str | None = None
    region: str | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None) -> RunContext:
        if env is None:
            return cls()
        region = env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION") or None
        return cls(profile=env.get("AWS_PROFILE") or None, region=region)


class Environment:
    def __init__(
        self,
        stdout: TextIO | None = None,
        outer: Environment | None = None,
        context: RunContext | None = None,
    ):
        self.store: dict[str, Value] = {}
        self.outer: Environment | None = outer
        if outer is not None:
            self.stdout: TextIO = outer.stdout
            self.context: RunContext = outer.context
        else:
            self.stdout = stdout if stdout is not None else sys.stdout
            self.context = context if context is not None else RunContext()

    def enclosed(self) -> Environment:
        """New child scope sharing this scope's output sink and context."""
        return Environment(outer=self)

    def get(self, name: str) -> Value | None:
        """Look name up through the scope chain; None when unbound."""
        env: Environment | None = self
        while env is not None:
            if name in env.store:
                return env.store[name]
            env = env.outer
        return None

    def declare_local(self, name: str, value: Value) -> Value:
        """Bind name in this scope, shadowing any outer binding."""
        self.store[name] = value
        return value

    def assign(self, name: str, value: Value) -> Value:
        """Update the nearest existing binding, or bind locally if there is none."""
        env: Environment | None = self
        while env is not None:
            if name in env.store:
                env.store[name] = value
                return value
            env = env.outer
        self.store[name] = value
        return value
