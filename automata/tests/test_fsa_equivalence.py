from itertools import product

from django.test import TestCase
from automata.automaton import Automaton
from automata.fsa_equivalence import are_automata_equivalent, find_state_mapping, normalise_automaton
from automata.fsa_properties import is_complete, is_deterministic
from automata.fsa_simulation import accepts


def ends_with_ab_nfa():
    return Automaton(
        states=['S0', 'S1', 'S2'],
        alphabet=['a', 'b'],
        transitions=[('S0', 'a', 'S0'), ('S0', 'a', 'S1'), ('S0', 'b', 'S0'), ('S1', 'b', 'S2')],
        start='S0',
        final=['S2'],
    )


def ends_with_ab_dfa():
    return Automaton(
        states=['A', 'B', 'C'],
        alphabet=['a', 'b'],
        transitions=[
            ('A', 'a', 'B'), ('A', 'b', 'A'),
            ('B', 'a', 'B'), ('B', 'b', 'C'),
            ('C', 'a', 'B'), ('C', 'b', 'A'),
        ],
        start='A',
        final=['C'],
    )


def only_a_complete():
    # Accepts exactly "a", with an explicit dead state
    return Automaton(
        states=['p', 'q', 'd'],
        alphabet=['a', 'b'],
        transitions=[
            ('p', 'a', 'q'), ('p', 'b', 'd'),
            ('q', 'a', 'd'), ('q', 'b', 'd'),
            ('d', 'a', 'd'), ('d', 'b', 'd'),
        ],
        start='p',
        final=['q'],
    )


class TestNormaliseAutomaton(TestCase):
    """Test cases for reduction to a minimal complete DFA"""

    def test_nfa_is_normalised_to_dfa(self):
        nfa = ends_with_ab_nfa()

        result = normalise_automaton(nfa)

        self.assertTrue(is_deterministic(result))
        self.assertTrue(is_complete(result))
        self.assertEqual(len(result.states), 3)
        for length in range(5):
            for word in product(nfa.alphabet, repeat=length):
                self.assertEqual(accepts(nfa, list(word)), accepts(result, list(word)),
                                 f"Disagreement on string '{''.join(word)}'")

    def test_partial_dfa_gets_single_dead_state(self):
        partial = Automaton(
            states=['p', 'q'],
            alphabet=['a', 'b'],
            transitions=[('p', 'a', 'q')],
            start='p',
            final=['q'],
        )

        result = normalise_automaton(partial)

        self.assertTrue(is_complete(result))
        self.assertEqual(len(result.states), 3)


class TestFindStateMapping(TestCase):
    def test_renamed_states(self):
        dfa1 = Automaton(
            states=['S0', 'S1'],
            alphabet=['a'],
            transitions=[('S0', 'a', 'S1'), ('S1', 'a', 'S0')],
            start='S0',
            final=['S1'],
        )
        dfa2 = Automaton(
            states=['X', 'Y'],
            alphabet=['a'],
            transitions=[('X', 'a', 'Y'), ('Y', 'a', 'X')],
            start='X',
            final=['Y'],
        )

        self.assertEqual(find_state_mapping(dfa1, dfa2), {'S0': 'X', 'S1': 'Y'})

    def test_different_accepting_states(self):
        dfa1 = Automaton(
            states=['S0', 'S1'],
            alphabet=['a'],
            transitions=[('S0', 'a', 'S1'), ('S1', 'a', 'S0')],
            start='S0',
            final=['S1'],
        )
        dfa2 = Automaton(
            states=['X', 'Y'],
            alphabet=['a'],
            transitions=[('X', 'a', 'Y'), ('Y', 'a', 'X')],
            start='X',
            final=['X'],
        )

        self.assertIsNone(find_state_mapping(dfa1, dfa2))

    def test_different_number_of_states(self):
        single = Automaton(
            states=['p'],
            alphabet=['a', 'b'],
            transitions=[('p', 'a', 'p'), ('p', 'b', 'p')],
            start='p',
            final=['p'],
        )

        self.assertIsNone(find_state_mapping(ends_with_ab_dfa(), single))


class TestAreAutomataEquivalent(TestCase):
    """Test cases for language equivalence"""

    def test_nfa_and_dfa_for_same_language(self):
        equivalent, details = are_automata_equivalent(ends_with_ab_nfa(), ends_with_ab_dfa())

        self.assertTrue(equivalent)
        self.assertEqual(details['reason'], 'Complete minimal DFAs are isomorphic')
        self.assertEqual(details['minimal_dfa1_states'], 3)
        self.assertEqual(details['minimal_dfa2_states'], 3)
        self.assertIn('state_mapping', details)

    def test_different_languages(self):
        ends_with_ba = Automaton(
            states=['A', 'B', 'C'],
            alphabet=['a', 'b'],
            transitions=[
                ('A', 'a', 'A'), ('A', 'b', 'B'),
                ('B', 'a', 'C'), ('B', 'b', 'B'),
                ('C', 'a', 'A'), ('C', 'b', 'B'),
            ],
            start='A',
            final=['C'],
        )

        equivalent, details = are_automata_equivalent(ends_with_ab_dfa(), ends_with_ba)

        self.assertFalse(equivalent)
        self.assertNotIn('state_mapping', details)

    def test_different_alphabets(self):
        other = Automaton(
            states=['S0'], alphabet=['a', 'c'], transitions=[], start='S0', final=['S0']
        )

        equivalent, details = are_automata_equivalent(ends_with_ab_dfa(), other)

        self.assertFalse(equivalent)
        self.assertEqual(details['reason'], 'Automata have different alphabets')

    def test_partial_and_complete_automata(self):
        partial = Automaton(
            states=['p', 'q'],
            alphabet=['a', 'b'],
            transitions=[('p', 'a', 'q')],
            start='p',
            final=['q'],
        )

        equivalent, _ = are_automata_equivalent(partial, only_a_complete())

        self.assertTrue(equivalent)

    def test_partial_automaton_with_dead_state(self):
        # y never reaches a final state and has no moves of its own
        partial = Automaton(
            states=['p', 'q', 'y'],
            alphabet=['a', 'b'],
            transitions=[('p', 'a', 'q'), ('p', 'b', 'y')],
            start='p',
            final=['q'],
        )

        equivalent, details = are_automata_equivalent(partial, only_a_complete())

        self.assertTrue(equivalent)
        self.assertEqual(details['minimal_dfa1_states'], 3)

    def test_empty_language(self):
        unreachable_final = Automaton(
            states=['S0', 'S1'],
            alphabet=['a'],
            transitions=[('S0', 'a', 'S0')],
            start='S0',
            final=['S1'],
        )
        no_final = Automaton(
            states=['T0', 'T1'],
            alphabet=['a'],
            transitions=[('T0', 'a', 'T1'), ('T1', 'a', 'T0')],
            start='T0',
        )

        equivalent, _ = are_automata_equivalent(unreachable_final, no_final)

        self.assertTrue(equivalent)

    def test_same_automaton(self):
        equivalent, details = are_automata_equivalent(ends_with_ab_nfa(), ends_with_ab_nfa())

        self.assertTrue(equivalent)
        self.assertEqual(details['automaton1_states'], 3)
