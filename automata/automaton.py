from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, NamedTuple, Optional, Tuple

# Symbols treated as epsilon when reporting; they are ordinary transitions otherwise.
EPSILON_SYMBOLS = frozenset({'', 'ε', 'epsilon'})


class Transition(NamedTuple):
    source: str
    symbol: str
    target: str


class Classification(str, Enum):
    DFA = 'DFA'
    NFA = 'NFA'


class Verdict(str, Enum):
    ACCEPT = 'ACCEPT'
    REJECT = 'REJECT'


@dataclass(frozen=True)
class Automaton:
    """
    An immutable finite automaton.

    DFA and NFA are classifications of an Automaton value, not separate types.
    States and alphabet keep their insertion order, which is used for
    reproducible output; the final states are a set.
    """
    states: Tuple[str, ...] = ()
    alphabet: Tuple[str, ...] = ()
    transitions: Tuple[Transition, ...] = ()
    start: str = ''
    final: FrozenSet[str] = frozenset()

    def __post_init__(self):
        # Accept lists from callers but store immutable containers
        object.__setattr__(self, 'states', tuple(self.states))
        object.__setattr__(self, 'alphabet', tuple(self.alphabet))
        object.__setattr__(self, 'transitions', tuple(Transition(*t) for t in self.transitions))
        object.__setattr__(self, 'final', frozenset(self.final))

    def transition_map(self) -> Dict[Tuple[str, str], List[str]]:
        """
        Group the transitions by (state, symbol).

        Returns:
            Dict mapping (state, symbol) to its distinct targets, in the order
            they first appear in the transition list.
        """
        mapping: Dict[Tuple[str, str], List[str]] = {}
        for source, symbol, target in self.transitions:
            targets = mapping.setdefault((source, symbol), [])
            if target not in targets:
                targets.append(target)
        return mapping

    def targets(self, state: str, symbol: str) -> List[str]:
        return self.transition_map().get((state, symbol), [])

    def order_states(self, states: Iterable[str]) -> Tuple[str, ...]:
        """Order a collection of state ids by their position in ``states``."""
        position = {state: index for index, state in enumerate(self.states)}
        unique = set(states)
        known = sorted((s for s in unique if s in position), key=position.__getitem__)
        unknown = sorted(s for s in unique if s not in position)
        return tuple(known + unknown)

    def to_dict(self) -> Dict:
        return {
            'states': list(self.states),
            'alphabet': list(self.alphabet),
            'transitions': [
                {'from': source, 'symbol': symbol, 'to': target}
                for source, symbol, target in self.transitions
            ],
            'start': self.start,
            'final': list(self.order_states(self.final)),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Automaton':
        """
        Build an Automaton from its JSON form.

        Args:
            data: A dictionary with the keys states, alphabet, transitions,
                start and final. ``startingState`` and ``acceptingStates`` are
                accepted as aliases, and transitions may be given either as a
                list of {"from", "symbol", "to"} objects, a list of triples, or
                a nested mapping {state: {symbol: [targets]}}.

        Returns:
            Automaton: The automaton described by ``data``.

        Raises:
            ValueError: If ``data`` is not a dictionary or a transition entry
                cannot be read.
        """
        if not isinstance(data, dict):
            raise ValueError('FSA must be a dictionary')

        raw_transitions = data.get('transitions') or []
        transitions = []
        if isinstance(raw_transitions, dict):
            for source, by_symbol in raw_transitions.items():
                for symbol, targets in (by_symbol or {}).items():
                    if isinstance(targets, str):
                        targets = [targets]
                    for target in targets:
                        transitions.append(Transition(source, symbol, target))
        else:
            for entry in raw_transitions:
                if isinstance(entry, dict):
                    try:
                        transitions.append(Transition(entry['from'], entry['symbol'], entry['to']))
                    except KeyError as e:
                        raise ValueError(f'Transition is missing key: {e.args[0]}') from e
                elif isinstance(entry, (list, tuple)) and len(entry) == 3:
                    transitions.append(Transition(*entry))
                else:
                    raise ValueError(f'Invalid transition entry: {entry!r}')

        start = data.get('start', data.get('startingState', '')) or ''
        final = data.get('final', data.get('acceptingStates', [])) or []

        return cls(
            states=data.get('states') or [],
            alphabet=data.get('alphabet') or [],
            transitions=transitions,
            start=start,
            final=final,
        )


class ValidationResult(NamedTuple):
    is_valid: bool
    errors: List[str]
    warnings: List[str]


class DeterminismReport(NamedTuple):
    classification: Classification
    missing: List[Tuple[str, str]]
    nondeterministic: List[Tuple[str, str, Tuple[str, ...]]]
    total_required: int
    total_present: int
    completeness_percentage: float
    is_complete: bool
    epsilon_transitions: List[Transition]


class TraceStep(NamedTuple):
    """One step of a simulation; step 0 is the initial configuration."""
    step: int
    symbol: Optional[str]
    active_before: Tuple[str, ...]
    active_after: Tuple[str, ...]
    verdict: Optional[Verdict] = None


class SimulationResult(NamedTuple):
    accepted: bool
    final_states: Tuple[str, ...]
    trace: Tuple[TraceStep, ...]
    rejection_reason: Optional[str] = None


class SubsetConstruction(NamedTuple):
    """Result of NFA to DFA conversion with metadata about the process"""
    dfa: Automaton
    subsets: Dict[str, Tuple[str, ...]]
    original_type: Classification
    original_state_count: int
    converted_state_count: int
    max_possible_states: int
    efficiency_percentage: float


class MinimisationResult(NamedTuple):
    """Result of DFA minimisation with metadata about the process"""
    dfa: Automaton
    equivalence_classes: Dict[str, Tuple[str, ...]]
    original_state_count: int
    minimised_state_count: int
    states_reduced: int
    reduction_percentage: float
    is_already_minimal: bool


class AutomatonAnalysis(NamedTuple):
    validation: ValidationResult
    classification: Classification
    determinism: DeterminismReport
    reachable_states: Tuple[str, ...]
    unreachable_states: Tuple[str, ...]
    dead_states: Tuple[str, ...]
    has_cycle: bool
    has_self_loops: bool
    accepts_empty_string: bool
    statistics: Dict
