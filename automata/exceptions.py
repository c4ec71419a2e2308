from typing import List, Tuple


class AutomatonError(ValueError):
    """Base class for every error raised by the automaton engine."""


class ParseError(AutomatonError):
    """The automaton text could not be turned into an Automaton."""


class MissingSectionError(ParseError):
    def __init__(self, section: str):
        self.section = section
        super().__init__(f"Missing required section: {section}:")


class MalformedTransitionError(ParseError):
    def __init__(self, line: str, line_number: int):
        self.line = line
        self.line_number = line_number
        super().__init__(
            f"Malformed transition on line {line_number}: '{line}' "
            f"(expected <from>,<symbol>,<to>)"
        )


class SimulationError(AutomatonError):
    """The automaton could not be run on the given input."""


class SymbolNotInAlphabetError(SimulationError):
    def __init__(self, symbol: str, position: int = 0):
        self.symbol = symbol
        self.position = position
        super().__init__(f"Symbol '{symbol}' not in alphabet (position {position})")


class MinimisationError(AutomatonError):
    """The automaton cannot be minimised."""


class NotDeterministicError(MinimisationError):
    def __init__(self, violations: List[Tuple[str, str, Tuple[str, ...]]]):
        self.violations = violations
        details = '; '.join(
            f"{state} on '{symbol}' -> {', '.join(targets)}"
            for state, symbol, targets in violations[:3]
        )
        super().__init__(
            f"DFA minimisation requires a deterministic FSA. "
            f"Nondeterministic transitions: {details}"
        )
