import logging
from collections import defaultdict
from typing import Dict, FrozenSet, List, Sequence, Set, Tuple, Union

from .automaton import Automaton, SimulationResult, TraceStep, Verdict
from .exceptions import SymbolNotInAlphabetError

logger = logging.getLogger(__name__)

InputSymbols = Union[str, Sequence[str]]


def simulate(automaton: Automaton, input_symbols: InputSymbols) -> SimulationResult:
    """
    Simulates an automaton (deterministic or not) on the given input.

    The same active-set algorithm is used for DFAs and NFAs: starting from
    {start}, each symbol replaces the active set with the union of the targets
    of every active state on that symbol. Processing stops early once the
    active set is empty.

    Args:
        automaton: The automaton to run
        input_symbols: A string (one symbol per character) or a sequence of
            symbol tokens for alphabets with multi-character symbols. The
            empty input denotes the empty string.

    Returns:
        SimulationResult: accepted, the final active states, the execution
        trace and, for rejected input, the reason it was rejected

    Raises:
        SymbolNotInAlphabetError: If any input symbol is not in the alphabet
    """
    symbols = list(input_symbols)
    alphabet = set(automaton.alphabet)
    for position, symbol in enumerate(symbols):
        if symbol not in alphabet:
            raise SymbolNotInAlphabetError(symbol, position)

    moves = _build_moves(automaton)
    active: FrozenSet[str] = frozenset({automaton.start})
    initial = automaton.order_states(active)
    trace: List[TraceStep] = [TraceStep(0, None, initial, initial)]
    rejection_reason = None

    for position, symbol in enumerate(symbols):
        next_active: Set[str] = set()
        for state in active:
            next_active.update(moves.get((state, symbol), ()))

        trace.append(TraceStep(
            step=position + 1,
            symbol=symbol,
            active_before=automaton.order_states(active),
            active_after=automaton.order_states(next_active),
        ))
        active = frozenset(next_active)

        if not active:
            # No state can become active again
            rejection_reason = (
                f"No transition on symbol '{symbol}' from "
                f"{', '.join(trace[-1].active_before)} at position {position}"
            )
            break

    accepted = bool(active & automaton.final)
    if not accepted and rejection_reason is None:
        rejection_reason = (
            f"No final state among the active states "
            f"{', '.join(automaton.order_states(active))}"
        )

    verdict = Verdict.ACCEPT if accepted else Verdict.REJECT
    trace[-1] = trace[-1]._replace(verdict=verdict)

    logger.debug('Simulated %d symbol(s): %s', len(symbols), verdict.value)

    return SimulationResult(
        accepted=accepted,
        final_states=automaton.order_states(active),
        trace=tuple(trace),
        rejection_reason=None if accepted else rejection_reason,
    )


def accepts(automaton: Automaton, input_symbols: InputSymbols) -> bool:
    return simulate(automaton, input_symbols).accepted


def _build_moves(automaton: Automaton) -> Dict[Tuple[str, str], Set[str]]:
    moves: Dict[Tuple[str, str], Set[str]] = defaultdict(set)
    for source, symbol, target in automaton.transitions:
        moves[(source, symbol)].add(target)
    return moves
