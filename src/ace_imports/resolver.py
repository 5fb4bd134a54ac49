"""Import resolution engine.

Turns the configured rule set into the imports that make sense for one document:

1. Resolve the quote style (see quotes.py)
2. Drop rules whose id is disabled
3. Drop rules whose ``import * as <name>`` text is already in the document
4. Drop rules whose dependency is not installed in a satisfying version
5. Keep the best rule for each bound name
6. Order survivors by where their name first appears in the rule set

Each stage only filters. Any error aborts the whole resolution; callers never see
a partial list.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from .descriptor import parse_dependency_descriptor
from .errors import AceImportsError, VersionResolutionError
from .models import (
    ANY_VERSION_RANGE,
    DependencyMap,
    ImportRule,
    QuoteStyleInputs,
    ResolvedImportSet,
)
from .quotes import resolve_quote_style
from .versions import min_version, satisfies, version_gte

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Candidate:
    """The best rule so far for a name, with the slot where that name first appeared."""

    index: int
    rule: ImportRule


def _names(rules: Iterable[ImportRule]) -> list[str]:
    return [rule.name for rule in rules]


def _log_abort(stage: str, rule: ImportRule, error: AceImportsError, **raw_values: object) -> None:
    logger.error(
        "Resolution aborted at stage %r for rule %r (id=%r, source=%r, dependency=%r, %s): %s",
        stage,
        rule.name,
        rule.id,
        rule.source,
        rule.dependency,
        ", ".join(f"{key}={value!r}" for key, value in raw_values.items()),
        error,
    )


def filter_disabled(rules: Iterable[ImportRule], disabled_ids: frozenset[str]) -> list[ImportRule]:
    """Drop rules whose id is disabled. Rules without an id always pass."""
    return [rule for rule in rules if rule.id is None or rule.id not in disabled_ids]


def filter_already_imported(rules: Iterable[ImportRule], document_text: str) -> list[ImportRule]:
    """Drop rules whose namespace import text already occurs in the document.

    This is a substring check: a commented-out import also counts as present.
    """
    return [rule for rule in rules if rule.import_prefix not in document_text]


def installed_min_version(package: str, installed_range: str) -> str:
    """Lowest version the installed range allows.

    Raises:
        InvalidDependencyDescriptorError: The installed range is not a valid range.
        VersionResolutionError: The range is valid but admits no version.
    """
    minimum = min_version(installed_range)
    if minimum is None:
        raise VersionResolutionError(package, installed_range)
    return minimum


def is_dependency_satisfied(rule: ImportRule, dependencies: DependencyMap) -> bool:
    """Check a rule's dependency gate against the installed dependencies.

    The rule passes when its package is installed and the minimum version of the
    installed range satisfies the rule's range.
    """
    spec = parse_dependency_descriptor(rule.gating_descriptor)
    installed_range = dependencies.get(spec.name)
    if installed_range is None:
        return False

    minimum = installed_min_version(spec.name, installed_range)
    return satisfies(minimum, spec.version_range)


def filter_satisfied(rules: Iterable[ImportRule], dependencies: DependencyMap) -> list[ImportRule]:
    """Drop rules whose dependency is missing or installed in an unsatisfying version."""
    satisfied: list[ImportRule] = []
    for rule in rules:
        try:
            if is_dependency_satisfied(rule, dependencies):
                satisfied.append(rule)
        except AceImportsError as e:
            _log_abort("dependency-satisfaction", rule, e, descriptor=rule.gating_descriptor)
            raise
    return satisfied


def _rule_min_version(rule: ImportRule, version_range: str) -> str:
    minimum = min_version(version_range)
    if minimum is None:
        raise VersionResolutionError(rule.name, version_range)
    return minimum


def is_better_candidate(candidate: ImportRule, current: ImportRule | None) -> bool:
    """Decide whether candidate should replace the current best rule for its name.

    - Anything beats no rule at all
    - A rule with an explicit dependency beats one without
    - A rule without an explicit dependency never replaces the current best
    - Between two explicit dependencies: identical ranges keep the current rule,
      a specific range beats "*", and otherwise the higher-or-equal minimum
      version wins
    """
    if current is None:
        return True
    if candidate.dependency is None:
        return False
    if current.dependency is None:
        return True

    current_range = parse_dependency_descriptor(current.dependency).version_range
    candidate_range = parse_dependency_descriptor(candidate.dependency).version_range
    if current_range == candidate_range:
        return False
    if current_range == ANY_VERSION_RANGE:
        return True
    if candidate_range == ANY_VERSION_RANGE:
        return False

    return version_gte(
        _rule_min_version(candidate, candidate_range),
        _rule_min_version(current, current_range),
    )


def select_best_per_name(rules: Sequence[ImportRule]) -> list[ImportRule]:
    """Keep exactly one rule per bound name.

    Each survivor takes the slot where its name first appeared in the rule set,
    so a later, better rule for a name does not move that name behind others.
    """
    best: dict[str, _Candidate] = {}
    for index, rule in enumerate(rules):
        current = best.get(rule.name)
        try:
            replace = is_better_candidate(rule, current.rule if current else None)
        except AceImportsError as e:
            _log_abort("deduplication", rule, e, competing_source=current.rule.source if current else None)
            raise
        if replace:
            best[rule.name] = _Candidate(index=current.index if current else index, rule=rule)

    survivors = sorted(best.values(), key=lambda candidate: candidate.index)
    return [candidate.rule for candidate in survivors]


def resolve_imports(
    rules: Sequence[ImportRule],
    disabled_ids: frozenset[str],
    dependencies: Mapping[str, str],
    document_text: str,
    quote_inputs: QuoteStyleInputs,
) -> ResolvedImportSet:
    """Compute the imports applicable to a document.

    Args:
        rules: Configured rules, in configuration order
        disabled_ids: Ids of rules switched off by the settings
        dependencies: Installed package name -> declared version range
        document_text: Full text of the document being edited
        quote_inputs: Quote styles from settings, formatter configs and history

    Returns:
        ResolvedImportSet with at most one rule per name, in rule-set order

    Raises:
        InvalidDependencyDescriptorError: A rule descriptor or installed range is malformed.
        VersionResolutionError: An installed range admits no version.
    """
    quote_style = resolve_quote_style(document_text, quote_inputs)
    logger.debug("Resolved quote style: %s", quote_style)

    enabled = filter_disabled(rules, disabled_ids)
    logger.debug("Filtered out disabled imports: %s", _names(enabled))

    not_imported = filter_already_imported(enabled, document_text)
    logger.debug("Filtered out already imported items: %s", _names(not_imported))

    installed = filter_satisfied(not_imported, dependencies)
    logger.debug("Filtered out imports not satisfied by installed dependencies: %s", _names(installed))

    survivors = select_best_per_name(installed)
    logger.debug("Final active imports: %s", [(rule.name, rule.source) for rule in survivors])

    return ResolvedImportSet(imports=tuple(survivors), quote_style=quote_style)
