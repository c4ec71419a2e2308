from .automaton import Automaton, Classification, Transition, Verdict
from .exceptions import (
    AutomatonError,
    MalformedTransitionError,
    MinimisationError,
    MissingSectionError,
    NotDeterministicError,
    ParseError,
    SimulationError,
    SymbolNotInAlphabetError,
)
from .fsa_parser import format_automaton, parse_automaton
from .fsa_properties import analyse_automaton, classify, determinism_report, validate_automaton
from .fsa_simulation import accepts, simulate
from .fsa_transformations import minimise_dfa, minimise_with_details, nfa_to_dfa, subset_construction
