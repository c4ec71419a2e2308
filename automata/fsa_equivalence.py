from collections import deque
from typing import Dict, Optional, Tuple

from .automaton import Automaton
from .fsa_properties import is_deterministic
from .fsa_transformations import complete_dfa, minimise_dfa, nfa_to_dfa, remove_unreachable_states


def normalise_automaton(automaton: Automaton) -> Automaton:
    """
    Convert an automaton to its canonical minimal complete DFA form.

    Args:
        automaton: An FSA (either NFA or DFA)

    Returns:
        A minimal complete DFA equivalent to the input automaton
    """
    preprocessed = remove_unreachable_states(automaton)

    if is_deterministic(preprocessed):
        dfa = preprocessed
    else:
        dfa = nfa_to_dfa(preprocessed)

    return complete_dfa(minimise_dfa(dfa))


def find_state_mapping(dfa1: Automaton, dfa2: Automaton) -> Optional[Dict[str, str]]:
    """
    Find a bijective mapping between states of two DFAs if they are isomorphic.

    Args:
        dfa1: First DFA
        dfa2: Second DFA

    Returns:
        A dictionary mapping states from dfa1 to dfa2, or None if no mapping exists
    """
    # Quick checks
    if len(dfa1.states) != len(dfa2.states):
        return None
    if len(dfa1.final) != len(dfa2.final):
        return None
    if set(dfa1.alphabet) != set(dfa2.alphabet):
        return None

    if not dfa1.states:
        return {}

    transitions1 = dfa1.transition_map()
    transitions2 = dfa2.transition_map()

    mapping: Dict[str, str] = {}
    queue = deque([(dfa1.start, dfa2.start)])

    while queue:
        state1, state2 = queue.popleft()

        if state1 in mapping:
            if mapping[state1] != state2:
                return None  # Inconsistent mapping
            continue

        mapping[state1] = state2

        if (state1 in dfa1.final) != (state2 in dfa2.final):
            return None

        for symbol in dfa1.alphabet:
            targets1 = transitions1.get((state1, symbol), [])
            targets2 = transitions2.get((state2, symbol), [])

            if len(targets1) != len(targets2):
                return None
            if targets1:
                queue.append((targets1[0], targets2[0]))

    # The mapping must also be injective and cover every state
    if len(mapping) != len(dfa1.states) or len(set(mapping.values())) != len(mapping):
        return None

    return mapping


def are_automata_equivalent(automaton1: Automaton, automaton2: Automaton) -> Tuple[bool, Dict]:
    """
    Check if two automata (NFAs or DFAs) are language-equivalent.

    Two automata are equivalent if and only if their minimal complete DFAs
    are isomorphic.

    Args:
        automaton1: First automaton (NFA or DFA)
        automaton2: Second automaton (NFA or DFA)

    Returns:
        A tuple of (is_equivalent, details) where details records the sizes of
        the intermediate automata and the reason for the verdict
    """
    details = {
        'automaton1_states': len(automaton1.states),
        'automaton2_states': len(automaton2.states),
    }

    if set(automaton1.alphabet) != set(automaton2.alphabet):
        details['reason'] = 'Automata have different alphabets'
        return False, details

    minimal1 = normalise_automaton(automaton1)
    minimal2 = normalise_automaton(automaton2)
    details['minimal_dfa1_states'] = len(minimal1.states)
    details['minimal_dfa2_states'] = len(minimal2.states)

    if len(minimal1.states) != len(minimal2.states):
        details['reason'] = 'Complete minimal DFAs have different number of states'
        return False, details

    mapping = find_state_mapping(minimal1, minimal2)
    if mapping is None:
        details['reason'] = 'Complete minimal DFAs are not isomorphic'
        return False, details

    details['reason'] = 'Complete minimal DFAs are isomorphic'
    details['state_mapping'] = mapping
    return True, details
