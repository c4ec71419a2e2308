import logging
from typing import List

from .automaton import Automaton, Transition
from .exceptions import MalformedTransitionError, MissingSectionError

logger = logging.getLogger(__name__)

SECTIONS = ['States', 'Alphabet', 'Transitions', 'Start', 'Final']


def _split_list(value: str) -> List[str]:
    return [token.strip() for token in value.split(',') if token.strip()]


def _is_header(line: str) -> bool:
    return any(line.startswith(f'{section}:') for section in SECTIONS)


def check_sections(text: str) -> List[str]:
    """
    List the sections a text block is missing.

    Args:
        text: The raw automaton description

    Returns:
        List[str]: Names of the missing sections, in grammar order
    """
    lines = [line.strip() for line in text.splitlines()]
    return [
        section for section in SECTIONS
        if not any(line.startswith(f'{section}:') for line in lines)
    ]


def parse_automaton(text: str, lenient: bool = False) -> Automaton:
    """
    Parses the line-oriented automaton description into an Automaton.

    Expected format:
        States: q0,q1,q2
        Alphabet: 0,1
        Transitions:
        q0,0,q1
        q1,1,q2
        Start: q0
        Final: q2

    The Transitions section runs until the next section header. No semantic
    validation is done here; use validate_automaton on the result.

    Args:
        text: The raw automaton description
        lenient: If True, missing sections produce empty fields and malformed
            transition lines are skipped with a warning instead of raising

    Returns:
        Automaton: The parsed automaton

    Raises:
        MissingSectionError: If a section is absent (strict mode only)
        MalformedTransitionError: If a transition line does not hold exactly
            three non-empty tokens (strict mode only)
    """
    if not lenient:
        missing = check_sections(text)
        if missing:
            raise MissingSectionError(missing[0])

    states: List[str] = []
    alphabet: List[str] = []
    transitions: List[Transition] = []
    start = ''
    final: List[str] = []

    in_transitions = False

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()

        if in_transitions and not _is_header(line):
            if line:
                _add_transition(transitions, line, line_number, lenient)
            continue
        in_transitions = False

        if line.startswith('States:'):
            states = _split_list(line[len('States:'):])
        elif line.startswith('Alphabet:'):
            alphabet = _split_list(line[len('Alphabet:'):])
        elif line.startswith('Transitions:'):
            in_transitions = True
            # "Transitions: q0,0,q1" carries its first transition inline
            inline = line[len('Transitions:'):].strip()
            if inline:
                _add_transition(transitions, inline, line_number, lenient)
        elif line.startswith('Start:'):
            start = line[len('Start:'):].strip()
        elif line.startswith('Final:'):
            final = _split_list(line[len('Final:'):])

    automaton = Automaton(
        states=states,
        alphabet=alphabet,
        transitions=transitions,
        start=start,
        final=final,
    )
    logger.debug(
        'Parsed automaton with %d states, %d symbols and %d transitions',
        len(automaton.states), len(automaton.alphabet), len(automaton.transitions),
    )
    return automaton


def _add_transition(transitions: List[Transition], line: str, line_number: int, lenient: bool):
    tokens = [token.strip() for token in line.split(',')]
    if len(tokens) == 3 and all(tokens):
        transitions.append(Transition(*tokens))
        return

    if not lenient:
        raise MalformedTransitionError(line, line_number)
    logger.warning('Skipping malformed transition on line %d: %r', line_number, line)


def format_automaton(automaton: Automaton) -> str:
    """Render an Automaton in the text format accepted by parse_automaton."""
    lines = [
        f"States: {','.join(automaton.states)}",
        f"Alphabet: {','.join(automaton.alphabet)}",
        'Transitions:',
    ]
    lines.extend(f'{source},{symbol},{target}' for source, symbol, target in automaton.transitions)
    lines.append(f'Start: {automaton.start}')
    lines.append(f"Final: {','.join(automaton.order_states(automaton.final))}")
    return '\n'.join(lines)
