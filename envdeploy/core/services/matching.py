"""
Match rules — narrow loosely-named candidates down to one.

A human types "Service"; the workspace holds Kernel.Service.csproj,
Kernel.Service.Tests.csproj and Legacy/Service.Host.csproj.  Each
rule looks at the remaining candidates and returns the subset it
prefers.  Rules run in the configured order and resolution stops at
the first rule whose subset has exactly one member.

Rules are registered by name in ``MATCH_RULES`` so the order (and the
set) comes from settings rather than from branching code.

Pure logic — no filesystem access.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """A file or folder that loosely matches the requested name."""

    name: str    # compared name (file stem or folder name)
    path: Path
    depth: int   # path components below the search root

    @property
    def sort_key(self) -> tuple[int, str]:
        return (self.depth, str(self.path).lower())


@dataclass(frozen=True)
class MatchContext:
    pattern: str
    namespace_prefix: str = ""


@dataclass(frozen=True)
class MatchOutcome:
    candidate: Candidate
    rule: str

    @property
    def heuristic(self) -> bool:
        return self.rule in HEURISTIC_RULES


MatchRule = Callable[[list[Candidate], MatchContext], list[Candidate]]


# ── Rules ───────────────────────────────────────────────────────


def _exact(candidates: list[Candidate], ctx: MatchContext) -> list[Candidate]:
    wanted = ctx.pattern.casefold()
    return [c for c in candidates if c.name.casefold() == wanted]


def _namespace(candidates: list[Candidate], ctx: MatchContext) -> list[Candidate]:
    if not ctx.namespace_prefix:
        return []
    wanted = (ctx.namespace_prefix + ctx.pattern).casefold()
    return [c for c in candidates if c.name.casefold() == wanted]


def _shallowest(candidates: list[Candidate], ctx: MatchContext) -> list[Candidate]:
    if not candidates:
        return []
    return [min(candidates, key=lambda c: c.sort_key)]


def _first(candidates: list[Candidate], ctx: MatchContext) -> list[Candidate]:
    if not candidates:
        return []
    return [min(candidates, key=lambda c: str(c.path).lower())]


MATCH_RULES: dict[str, MatchRule] = {
    "exact": _exact,
    "namespace": _namespace,
    "shallowest": _shallowest,
    "first": _first,
}

# Rules that always pick something; their choice may be wrong
HEURISTIC_RULES = frozenset({"shallowest", "first"})


def resolve_unique(
    candidates: list[Candidate],
    pattern: str,
    rule_names: list[str],
    namespace_prefix: str = "",
) -> MatchOutcome | None:
    """Apply rules in order; return the first unique pick.

    A single candidate is returned as-is (rule "only") without
    consulting the rules.  A rule that keeps several candidates
    narrows the set the next rule sees; a rule that keeps none is
    skipped.

    Returns:
        MatchOutcome, or None when no rule narrowed the set to one.
    """
    if not candidates:
        return None

    if len(candidates) == 1:
        return MatchOutcome(candidate=candidates[0], rule="only")

    ctx = MatchContext(pattern=pattern, namespace_prefix=namespace_prefix)
    remaining = list(candidates)
    for rule_name in rule_names:
        picked = MATCH_RULES[rule_name](remaining, ctx)
        logger.debug("Rule %s: %d of %d candidates", rule_name, len(picked), len(remaining))
        if len(picked) == 1:
            return MatchOutcome(candidate=picked[0], rule=rule_name)
        if picked:
            remaining = picked

    return None
