from django.test import TestCase
from automata.automaton import Automaton, Transition
from automata.exceptions import MalformedTransitionError, MissingSectionError, ParseError
from automata.fsa_parser import check_sections, format_automaton, parse_automaton
from automata.fsa_properties import validate_automaton


EVEN_ONES_TEXT = """States: q0,q1
Alphabet: 0,1
Transitions:
q0,0,q0
q0,1,q1
q1,0,q1
q1,1,q0
Start: q0
Final: q0"""


class TestParseAutomaton(TestCase):
    """Test cases for the text format parser"""

    def test_parse_complete_text(self):
        automaton = parse_automaton(EVEN_ONES_TEXT)

        self.assertEqual(automaton.states, ('q0', 'q1'))
        self.assertEqual(automaton.alphabet, ('0', '1'))
        self.assertEqual(automaton.transitions, (
            Transition('q0', '0', 'q0'),
            Transition('q0', '1', 'q1'),
            Transition('q1', '0', 'q1'),
            Transition('q1', '1', 'q0'),
        ))
        self.assertEqual(automaton.start, 'q0')
        self.assertEqual(automaton.final, frozenset({'q0'}))

    def test_whitespace_is_trimmed(self):
        text = """  States:  q0 , q1
Alphabet: a ,b
Transitions:
  q0 , a , q1
q1,b,  q0

Start:   q0
Final: q1 """
        automaton = parse_automaton(text)

        self.assertEqual(automaton.states, ('q0', 'q1'))
        self.assertEqual(automaton.alphabet, ('a', 'b'))
        self.assertEqual(automaton.transitions, (
            Transition('q0', 'a', 'q1'),
            Transition('q1', 'b', 'q0'),
        ))
        self.assertEqual(automaton.start, 'q0')
        self.assertEqual(automaton.final, frozenset({'q1'}))

    def test_sections_in_any_order(self):
        text = """Start: q0
Final: q1
Alphabet: a
States: q0,q1
Transitions:
q0,a,q1"""
        automaton = parse_automaton(text)

        self.assertEqual(automaton.states, ('q0', 'q1'))
        self.assertEqual(automaton.transitions, (Transition('q0', 'a', 'q1'),))
        self.assertEqual(automaton.start, 'q0')

    def test_first_transition_on_header_line(self):
        text = """States: q0,q1,q2
Alphabet: 0,1
Transitions: q0,0,q1
q0,1,q2
Start: q0
Final: q2"""
        automaton = parse_automaton(text)

        self.assertEqual(automaton.transitions, (
            Transition('q0', '0', 'q1'),
            Transition('q0', '1', 'q2'),
        ))

    def test_missing_final_section_strict(self):
        text = EVEN_ONES_TEXT.replace('\nFinal: q0', '')

        with self.assertRaises(MissingSectionError) as context:
            parse_automaton(text)

        self.assertEqual(context.exception.section, 'Final')
        self.assertIn('Final', str(context.exception))

    def test_missing_final_section_lenient(self):
        text = EVEN_ONES_TEXT.replace('\nFinal: q0', '')

        automaton = parse_automaton(text, lenient=True)
        self.assertEqual(automaton.final, frozenset())

        # Validation must point at the final states
        validation = validate_automaton(automaton)
        self.assertFalse(validation.is_valid)
        self.assertTrue(any('final' in error.lower() for error in validation.errors))

    def test_first_missing_section_is_reported(self):
        with self.assertRaises(MissingSectionError) as context:
            parse_automaton('Start: q0\nFinal: q0')

        self.assertEqual(context.exception.section, 'States')

    def test_empty_text_lenient(self):
        automaton = parse_automaton('', lenient=True)

        self.assertEqual(automaton, Automaton())

    def test_malformed_transition_strict(self):
        text = """States: q0,q1
Alphabet: 0,1
Transitions:
q0,0,q1
q0,1
Start: q0
Final: q1"""
        with self.assertRaises(MalformedTransitionError) as context:
            parse_automaton(text)

        self.assertEqual(context.exception.line, 'q0,1')
        self.assertEqual(context.exception.line_number, 5)
        self.assertIsInstance(context.exception, ParseError)

    def test_transition_with_empty_token_is_malformed(self):
        text = """States: q0,q1
Alphabet: 0
Transitions:
q0,,q1
Start: q0
Final: q1"""
        with self.assertRaises(MalformedTransitionError):
            parse_automaton(text)

    def test_malformed_transition_lenient_is_skipped(self):
        text = """States: q0,q1
Alphabet: 0,1
Transitions:
q0,0,q1
q0,1
q1,0,q1,extra
q1,1,q0
Start: q0
Final: q1"""
        with self.assertLogs('automata.fsa_parser', level='WARNING') as logs:
            automaton = parse_automaton(text, lenient=True)

        self.assertEqual(automaton.transitions, (
            Transition('q0', '0', 'q1'),
            Transition('q1', '1', 'q0'),
        ))
        self.assertEqual(len(logs.records), 2)

    def test_parser_does_not_validate(self):
        text = """States: q0,q0
Alphabet: a
Transitions:
q0,b,q9
Start: q5
Final: q7"""
        automaton = parse_automaton(text)

        self.assertEqual(automaton.states, ('q0', 'q0'))
        self.assertEqual(automaton.start, 'q5')
        self.assertEqual(automaton.transitions, (Transition('q0', 'b', 'q9'),))


class TestFormatAutomaton(TestCase):
    """Test cases for rendering an automaton back to text"""

    def test_format_round_trip(self):
        automaton = parse_automaton(EVEN_ONES_TEXT)

        text = format_automaton(automaton)

        self.assertEqual(text, EVEN_ONES_TEXT)
        self.assertEqual(parse_automaton(text), automaton)

    def test_check_sections(self):
        self.assertEqual(check_sections(EVEN_ONES_TEXT), [])
        self.assertEqual(check_sections('States: q0\nStart: q0'), ['Alphabet', 'Transitions', 'Final'])
