import logging
from collections import Counter, defaultdict, deque
from typing import Dict, List, Set, Tuple

from .automaton import (
    EPSILON_SYMBOLS,
    Automaton,
    AutomatonAnalysis,
    Classification,
    DeterminismReport,
    ValidationResult,
)

logger = logging.getLogger(__name__)


def validate_automaton(automaton: Automaton) -> ValidationResult:
    """
    Checks the structural consistency of an automaton.

    Every check runs independently so that all problems are reported together.
    This never raises; warnings are left to analyse_automaton.

    Args:
        automaton: The automaton to validate

    Returns:
        ValidationResult: is_valid, the list of errors and an empty warnings list
    """
    errors: List[str] = []
    states = set(automaton.states)
    alphabet = set(automaton.alphabet)

    if not automaton.states:
        errors.append('States must be a non-empty list')
    else:
        duplicates = _duplicates(automaton.states)
        if duplicates:
            errors.append(f"Duplicate states found: {', '.join(duplicates)}")

    if not automaton.alphabet:
        errors.append('Alphabet must be a non-empty list')
    else:
        duplicates = _duplicates(automaton.alphabet)
        if duplicates:
            errors.append(f"Duplicate symbols in alphabet: {', '.join(duplicates)}")

    if not automaton.start:
        errors.append('Start state is required')
    elif automaton.start not in states:
        errors.append(f"Start state '{automaton.start}' is not in the states set")

    if not automaton.final:
        errors.append('At least one final state is required')
    for state in sorted(automaton.final - states):
        errors.append(f"Final state '{state}' is not in the states set")

    for source, symbol, target in automaton.transitions:
        label = f'{source},{symbol},{target}'
        if source not in states:
            errors.append(f"Transition {label}: source state '{source}' is not in the states set")
        if target not in states:
            errors.append(f"Transition {label}: target state '{target}' is not in the states set")
        if symbol not in alphabet:
            errors.append(f"Transition {label}: symbol '{symbol}' is not in the alphabet")

    return ValidationResult(is_valid=not errors, errors=errors, warnings=[])


def _duplicates(values: Tuple[str, ...]) -> List[str]:
    counts = Counter(values)
    return [value for value in counts if counts[value] > 1]


def determinism_report(automaton: Automaton) -> DeterminismReport:
    """
    Reports how far an automaton is from being a DFA.

    A pair (state, symbol) over states x alphabet is present when it has at
    least one target. The automaton is a DFA iff every pair has exactly one
    distinct target; missing or multiple targets make it an NFA.

    Args:
        automaton: The automaton to inspect

    Returns:
        DeterminismReport: The classification, the missing and nondeterministic
        pairs, completeness figures and any epsilon transitions
    """
    transition_map = automaton.transition_map()
    missing: List[Tuple[str, str]] = []
    nondeterministic: List[Tuple[str, str, Tuple[str, ...]]] = []
    total_present = 0

    for state in automaton.states:
        for symbol in automaton.alphabet:
            targets = transition_map.get((state, symbol), [])
            if not targets:
                missing.append((state, symbol))
                continue
            total_present += 1
            if len(targets) > 1:
                nondeterministic.append((state, symbol, tuple(targets)))

    total_required = len(automaton.states) * len(automaton.alphabet)
    if total_required:
        completeness = round(total_present / total_required * 100, 1)
    else:
        completeness = 0.0

    classification = Classification.NFA if missing or nondeterministic else Classification.DFA

    return DeterminismReport(
        classification=classification,
        missing=missing,
        nondeterministic=nondeterministic,
        total_required=total_required,
        total_present=total_present,
        completeness_percentage=completeness,
        is_complete=not missing,
        epsilon_transitions=[t for t in automaton.transitions if t.symbol in EPSILON_SYMBOLS],
    )


def classify(automaton: Automaton) -> Classification:
    """Classify an automaton as DFA or NFA."""
    return determinism_report(automaton).classification


def is_deterministic(automaton: Automaton) -> bool:
    """
    Checks that no (state, symbol) pair has more than one target.

    Unlike classify, a partial transition function is allowed here.
    """
    return all(len(targets) <= 1 for targets in automaton.transition_map().values())


def is_complete(automaton: Automaton) -> bool:
    return determinism_report(automaton).is_complete


def reachable_states(automaton: Automaton) -> Tuple[str, ...]:
    """States reachable from the start state through any transition."""
    if not automaton.start:
        return ()

    successors = _successors(automaton)
    reachable = {automaton.start}
    queue = deque([automaton.start])

    while queue:
        current = queue.popleft()
        for target in successors[current]:
            if target not in reachable:
                reachable.add(target)
                queue.append(target)

    return automaton.order_states(reachable)


def unreachable_states(automaton: Automaton) -> Tuple[str, ...]:
    reachable = set(reachable_states(automaton))
    return tuple(state for state in automaton.states if state not in reachable)


def dead_states(automaton: Automaton) -> Tuple[str, ...]:
    """
    States from which no final state can be reached.

    Args:
        automaton: The automaton to inspect

    Returns:
        Tuple of dead states in automaton order
    """
    # BFS backwards from the final states
    predecessors: Dict[str, Set[str]] = defaultdict(set)
    for source, _, target in automaton.transitions:
        predecessors[target].add(source)

    alive = set(automaton.final)
    queue = deque(alive)
    while queue:
        state = queue.popleft()
        for predecessor in predecessors[state]:
            if predecessor not in alive:
                alive.add(predecessor)
                queue.append(predecessor)

    return tuple(state for state in automaton.states if state not in alive)


def has_cycle(automaton: Automaton) -> bool:
    """Checks for a cycle among the states reachable from the start state."""
    reachable = set(reachable_states(automaton))
    successors = _successors(automaton)

    # Kahn's algorithm: a cycle remains iff not every state can be removed
    in_degree = {state: 0 for state in reachable}
    for state in reachable:
        for target in successors[state]:
            if target in in_degree:
                in_degree[target] += 1

    queue = deque(state for state, degree in in_degree.items() if degree == 0)
    removed = 0
    while queue:
        state = queue.popleft()
        removed += 1
        for target in successors[state]:
            if target in in_degree:
                in_degree[target] -= 1
                if in_degree[target] == 0:
                    queue.append(target)

    return removed < len(reachable)


def has_self_loops(automaton: Automaton) -> bool:
    return any(source == target for source, _, target in automaton.transitions)


def _successors(automaton: Automaton) -> Dict[str, List[str]]:
    successors: Dict[str, List[str]] = defaultdict(list)
    for source, _, target in automaton.transitions:
        if target not in successors[source]:
            successors[source].append(target)
    return successors


def transition_statistics(automaton: Automaton) -> Dict:
    """
    Summarise the shape of the transition function.

    Returns:
        Dict: Dictionary containing:
        {
            'total_transitions': int,
            'transition_density': float,  # percentage of states x alphabet
            'state_transition_counts': {state: {'outgoing': int, 'incoming': int}},
            'symbol_usage': {symbol: int},
            'transition_types': {'self_loops': int, 'forward': int, 'backward': int}
        }
    """
    total = len(automaton.transitions)
    max_possible = len(automaton.states) * len(automaton.alphabet)
    density = round(total / max_possible * 100, 1) if max_possible else 0.0

    outgoing = Counter(t.source for t in automaton.transitions)
    incoming = Counter(t.target for t in automaton.transitions)
    usage = Counter(t.symbol for t in automaton.transitions)

    position = {state: index for index, state in enumerate(automaton.states)}
    transition_types = {'self_loops': 0, 'forward': 0, 'backward': 0}
    for source, _, target in automaton.transitions:
        if source == target:
            transition_types['self_loops'] += 1
        elif position.get(target, -1) > position.get(source, -1):
            transition_types['forward'] += 1
        else:
            transition_types['backward'] += 1

    return {
        'total_transitions': total,
        'transition_density': density,
        'state_transition_counts': {
            state: {'outgoing': outgoing[state], 'incoming': incoming[state]}
            for state in automaton.states
        },
        'symbol_usage': {symbol: usage[symbol] for symbol in automaton.alphabet},
        'transition_types': transition_types,
    }


def analyse_automaton(automaton: Automaton) -> AutomatonAnalysis:
    """
    Run validation, classification and connectivity analysis together.

    Structural oddities that do not make the automaton invalid (unreachable
    states, dead states, epsilon transitions) are added to the validation
    warnings.

    Args:
        automaton: The automaton to analyse

    Returns:
        AutomatonAnalysis: The combined report
    """
    validation = validate_automaton(automaton)
    report = determinism_report(automaton)
    unreachable = unreachable_states(automaton)
    dead = dead_states(automaton) if automaton.final else ()

    warnings = list(validation.warnings)
    for state in unreachable:
        warnings.append(f"State '{state}' is unreachable from the start state")
    for state in dead:
        warnings.append(f"State '{state}' cannot reach a final state")
    if report.epsilon_transitions:
        warnings.append(
            f'Found {len(report.epsilon_transitions)} epsilon transition(s); '
            f'they are treated as ordinary symbols'
        )

    logger.debug('Analysed automaton: %s, %d warning(s)', report.classification.value, len(warnings))

    return AutomatonAnalysis(
        validation=validation._replace(warnings=warnings),
        classification=report.classification,
        determinism=report,
        reachable_states=reachable_states(automaton),
        unreachable_states=unreachable,
        dead_states=dead,
        has_cycle=has_cycle(automaton),
        has_self_loops=has_self_loops(automaton),
        accepts_empty_string=automaton.start in automaton.final,
        statistics=transition_statistics(automaton),
    )
