import logging
from collections import defaultdict, deque
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from .automaton import Automaton, MinimisationResult, SubsetConstruction, Transition
from .exceptions import NotDeterministicError
from .fsa_properties import classify, reachable_states

logger = logging.getLogger(__name__)


def subset_construction(nfa: Automaton, complete: bool = False) -> SubsetConstruction:
    """
    Converts an NFA into an equivalent DFA using the subset construction
    algorithm, keeping track of which NFA states each DFA state stands for.

    DFA states are labelled Q0, Q1, ... in the order their subsets are first
    discovered; Q0 is always the start subset {start}. When a symbol leads
    nowhere the transition is left out, so the result may be partial.

    Args:
        nfa: The automaton to convert. A DFA is accepted as well and comes
            back relabelled.
        complete: If True, the empty subset is kept as a dead state with
            self-loops so the result is a complete DFA

    Returns:
        SubsetConstruction: The DFA together with the subset behind each label
        and size metrics (the worst case is 2^|states| subsets)
    """
    moves: Dict[Tuple[str, str], Set[str]] = defaultdict(set)
    for source, symbol, target in nfa.transitions:
        moves[(source, symbol)].add(target)

    start_set = frozenset({nfa.start})
    labels: Dict[FrozenSet[str], str] = {start_set: 'Q0'}
    queue = deque([start_set])
    transitions: List[Transition] = []

    while queue:
        current = queue.popleft()
        current_label = labels[current]

        for symbol in nfa.alphabet:
            target_set: Set[str] = set()
            for state in current:
                target_set.update(moves.get((state, symbol), ()))

            if not target_set and not complete:
                continue

            key = frozenset(target_set)
            if key not in labels:
                labels[key] = f'Q{len(labels)}'
                queue.append(key)
                logger.debug('Discovered %s = {%s}', labels[key], ', '.join(nfa.order_states(key)))

            transitions.append(Transition(current_label, symbol, labels[key]))

    final = [label for subset, label in labels.items() if subset & nfa.final]

    dfa = Automaton(
        states=list(labels.values()),
        alphabet=nfa.alphabet,
        transitions=transitions,
        start='Q0',
        final=final,
    )

    max_possible = 2 ** len(nfa.states)
    efficiency = round((max_possible - len(labels)) / max_possible * 100, 1)

    return SubsetConstruction(
        dfa=dfa,
        subsets={label: nfa.order_states(subset) for subset, label in labels.items()},
        original_type=classify(nfa),
        original_state_count=len(nfa.states),
        converted_state_count=len(labels),
        max_possible_states=max_possible,
        efficiency_percentage=efficiency,
    )


def nfa_to_dfa(nfa: Automaton, complete: bool = False) -> Automaton:
    """Convert an NFA to a DFA; see subset_construction."""
    return subset_construction(nfa, complete=complete).dfa


def _nondeterministic_pairs(automaton: Automaton) -> List[Tuple[str, str, Tuple[str, ...]]]:
    return [
        (state, symbol, tuple(targets))
        for (state, symbol), targets in automaton.transition_map().items()
        if len(targets) > 1
    ]


def _dead_state_name(states) -> str:
    dead_state_name = 'DEAD'
    counter = 1
    while dead_state_name in states:
        dead_state_name = f'DEAD_{counter}'
        counter += 1
    return dead_state_name


def complete_dfa(dfa: Automaton) -> Automaton:
    """
    Completes a DFA by adding a dead state and missing transitions if necessary.

    Args:
        dfa: The DFA to complete; it may be partial

    Returns:
        Automaton: A complete DFA, or ``dfa`` itself when nothing is missing

    Raises:
        NotDeterministicError: If a state has several targets on one symbol
    """
    violations = _nondeterministic_pairs(dfa)
    if violations:
        raise NotDeterministicError(violations)

    transition_map = dfa.transition_map()
    missing = [
        (state, symbol)
        for state in dfa.states
        for symbol in dfa.alphabet
        if (state, symbol) not in transition_map
    ]
    if not missing:
        return dfa

    dead = _dead_state_name(dfa.states)
    transitions = list(dfa.transitions)
    transitions.extend(Transition(state, symbol, dead) for state, symbol in missing)
    # Dead state transitions to itself
    transitions.extend(Transition(dead, symbol, dead) for symbol in dfa.alphabet)

    return Automaton(
        states=dfa.states + (dead,),
        alphabet=dfa.alphabet,
        transitions=transitions,
        start=dfa.start,
        final=dfa.final,
    )


def remove_unreachable_states(automaton: Automaton) -> Automaton:
    """Remove states that are unreachable from the start state."""
    reachable = set(reachable_states(automaton))

    return Automaton(
        states=[s for s in automaton.states if s in reachable],
        alphabet=automaton.alphabet,
        transitions=[t for t in automaton.transitions if t.source in reachable],
        start=automaton.start,
        final=automaton.final & reachable,
    )


def minimise_with_details(dfa: Automaton) -> MinimisationResult:
    """
    Minimises a deterministic finite automaton using partition refinement
    (Hopcroft's worklist algorithm).

    Starting from the partition {final, non-final}, blocks are split by the
    states whose transition on a symbol lands in a splitter block. When a block
    outside the worklist splits, only the smaller half is queued, and the
    intersection wins ties. The block holding the original start state becomes
    q0; the other blocks are numbered q1, q2, ... in partition order.

    A partial DFA is first completed with a sink state so that refinement sees
    a total transition function; the sink is left out of the result.

    Args:
        dfa: The DFA to minimise. It may be partial but must not have several
            targets for one (state, symbol) pair.

    Returns:
        MinimisationResult: The minimal DFA, the original states merged into
        each new state and reduction metrics

    Raises:
        NotDeterministicError: If the input is not deterministic
    """
    violations = _nondeterministic_pairs(dfa)
    if violations:
        raise NotDeterministicError(violations)

    if not dfa.states:
        return MinimisationResult(
            dfa=Automaton(alphabet=dfa.alphabet),
            equivalence_classes={},
            original_state_count=0,
            minimised_state_count=0,
            states_reduced=0,
            reduction_percentage=0.0,
            is_already_minimal=True,
        )

    states = list(dfa.order_states(
        set(dfa.states) | {dfa.start} | {t.source for t in dfa.transitions} | {t.target for t in dfa.transitions}
    ))
    alphabet = list(dfa.alphabet)

    move: Dict[Tuple[str, str], str] = {
        (state, symbol): targets[0] for (state, symbol), targets in dfa.transition_map().items()
    }

    # Route missing transitions to a sink so every state moves on every symbol
    total_move = dict(move)
    sink: Optional[str] = None
    for state in states:
        for symbol in alphabet:
            if (state, symbol) not in total_move:
                if sink is None:
                    sink = _dead_state_name(states)
                total_move[(state, symbol)] = sink
    if sink is not None:
        states.append(sink)
        for symbol in alphabet:
            total_move[(sink, symbol)] = sink

    reverse: Dict[str, Dict[str, Set[str]]] = {symbol: defaultdict(set) for symbol in alphabet}
    for (state, symbol), target in total_move.items():
        if symbol in reverse:
            reverse[symbol][target].add(state)

    accepting = frozenset(s for s in states if s in dfa.final)
    non_accepting = frozenset(s for s in states if s not in dfa.final)

    partition: List[FrozenSet[str]] = [block for block in (accepting, non_accepting) if block]
    worklist: List[FrozenSet[str]] = [accepting] if accepting else []

    while worklist:
        splitter = worklist.pop()
        for symbol in alphabet:
            involved: Set[str] = set()
            for state in splitter:
                involved |= reverse[symbol].get(state, set())
            if not involved:
                continue

            for group in list(partition):
                inter = group & involved
                diff = group - involved
                if not inter or not diff:
                    continue

                partition.remove(group)
                partition.extend([inter, diff])
                if group in worklist:
                    worklist = [block for block in worklist if block != group]
                    worklist.extend([inter, diff])
                else:
                    worklist.append(inter if len(inter) <= len(diff) else diff)

    blocks = [block - {sink} for block in partition if block - {sink}]
    start_index = next(i for i, block in enumerate(blocks) if dfa.start in block)

    def label_for(index: int) -> str:
        if index == start_index:
            return 'q0'
        return f'q{index + 1 if index < start_index else index}'

    block_labels = [label_for(i) for i in range(len(blocks))]
    ordered = sorted(range(len(blocks)), key=lambda i: int(block_labels[i][1:]))

    state_map: Dict[str, str] = {}
    for index, block in enumerate(blocks):
        for state in block:
            state_map[state] = block_labels[index]
    if sink is not None:
        # A sink merged with real dead states takes their label
        for block in partition:
            if sink in block and block - {sink}:
                state_map[sink] = state_map[next(iter(block - {sink}))]

    new_transitions: Dict[Transition, None] = {}
    for index in ordered:
        representative = dfa.order_states(blocks[index])[0]
        for symbol in alphabet:
            # Every member agrees on the target block
            target = state_map.get(total_move[(representative, symbol)])
            if target is not None:
                new_transitions[Transition(block_labels[index], symbol, target)] = None

    minimised = Automaton(
        states=[block_labels[i] for i in ordered],
        alphabet=dfa.alphabet,
        transitions=list(new_transitions),
        start='q0',
        final=[block_labels[i] for i, block in enumerate(blocks) if block & dfa.final],
    )

    original_count = len(dfa.states)
    reduced = original_count - len(blocks)
    logger.debug('Minimised DFA from %d to %d states', original_count, len(blocks))

    return MinimisationResult(
        dfa=minimised,
        equivalence_classes={block_labels[i]: dfa.order_states(blocks[i]) for i in ordered},
        original_state_count=original_count,
        minimised_state_count=len(blocks),
        states_reduced=reduced,
        reduction_percentage=round(reduced / original_count * 100, 1),
        is_already_minimal=reduced == 0,
    )


def minimise_dfa(dfa: Automaton) -> Automaton:
    """Minimise a DFA; see minimise_with_details."""
    return minimise_with_details(dfa).dfa
