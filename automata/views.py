import json
import logging
from functools import wraps
from typing import Dict

from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .automaton import Automaton, Classification, DeterminismReport, SimulationResult, ValidationResult
from .exceptions import AutomatonError
from .fsa_equivalence import are_automata_equivalent
from .fsa_parser import parse_automaton
from .fsa_properties import analyse_automaton, determinism_report, validate_automaton
from .fsa_simulation import simulate
from .fsa_transformations import minimise_with_details, subset_construction

logger = logging.getLogger(__name__)


class AutomatonTooLarge(Exception):
    pass


def handle_engine_errors(view):
    """Turn engine and request errors into JSON error responses."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except json.JSONDecodeError:
            return JsonResponse({'error': 'Request body must be valid JSON'}, status=400)
        except AutomatonError as e:
            return JsonResponse({'error': str(e), 'error_type': type(e).__name__}, status=400)
        except AutomatonTooLarge as e:
            return JsonResponse({'error': str(e)}, status=413)
        except ValueError as e:
            return JsonResponse({'error': str(e)}, status=400)
        except Exception as e:
            logger.exception('Unexpected error in %s', view.__name__)
            return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)
    return wrapper


def _load_automaton(data: Dict, key: str = 'fsa', text_key: str = 'text') -> Automaton:
    """
    Read an automaton from the request body, either as text or as JSON.

    The text form is parsed strictly unless the request sets "lenient" or the
    AUTOMATA_LENIENT_PARSING setting is enabled.
    """
    if data.get(text_key):
        lenient = data.get('lenient', getattr(settings, 'AUTOMATA_LENIENT_PARSING', False))
        return parse_automaton(data[text_key], lenient=bool(lenient))

    fsa = data.get(key)
    if not fsa:
        raise ValueError('Missing FSA definition')
    return Automaton.from_dict(fsa)


def _invalid_response(validation: ValidationResult) -> JsonResponse:
    return JsonResponse({
        'error': 'Invalid automaton',
        'errors': validation.errors,
    }, status=400)


def _check_size(automaton: Automaton):
    max_states = getattr(settings, 'AUTOMATA_MAX_STATES', 64)
    if len(automaton.states) > max_states:
        raise AutomatonTooLarge(
            f'Automaton has {len(automaton.states)} states; the limit is {max_states}'
        )


def _validation_to_json(validation: ValidationResult) -> Dict:
    return {
        'is_valid': validation.is_valid,
        'errors': validation.errors,
        'warnings': validation.warnings,
    }


def _report_to_json(report: DeterminismReport) -> Dict:
    return {
        'classification': report.classification.value,
        'missing': [{'state': state, 'symbol': symbol} for state, symbol in report.missing],
        'nondeterministic': [
            {'state': state, 'symbol': symbol, 'targets': list(targets)}
            for state, symbol, targets in report.nondeterministic
        ],
        'total_required': report.total_required,
        'total_present': report.total_present,
        'completeness_percentage': report.completeness_percentage,
        'is_complete': report.is_complete,
        'epsilon_transitions': [list(t) for t in report.epsilon_transitions],
    }


def _simulation_to_json(result: SimulationResult) -> Dict:
    return {
        'accepted': result.accepted,
        'final_states': list(result.final_states),
        'rejection_reason': result.rejection_reason,
        'trace': [
            {
                'step': step.step,
                'symbol': step.symbol,
                'active_before': list(step.active_before),
                'active_after': list(step.active_after),
                'verdict': step.verdict.value if step.verdict else None,
            }
            for step in result.trace
        ],
    }


@csrf_exempt
@require_POST
@handle_engine_errors
def parse_text(request):
    """
    Parse the text format into the JSON automaton form.

    Expects a POST request with a JSON body containing:
    - text: The automaton description
    - lenient: Optional, skip malformed lines instead of failing
    """
    data = json.loads(request.body)
    if not data.get('text'):
        return JsonResponse({'error': 'Missing automaton text'}, status=400)

    automaton = _load_automaton(data)
    return JsonResponse({
        'fsa': automaton.to_dict(),
        'validation': _validation_to_json(validate_automaton(automaton)),
    })


@csrf_exempt
@require_POST
@handle_engine_errors
def validate_fsa(request):
    data = json.loads(request.body)
    automaton = _load_automaton(data)
    return JsonResponse(_validation_to_json(validate_automaton(automaton)))


@csrf_exempt
@require_POST
@handle_engine_errors
def classify_fsa(request):
    """Return the DFA/NFA classification with its determinism report."""
    data = json.loads(request.body)
    automaton = _load_automaton(data)

    validation = validate_automaton(automaton)
    if not validation.is_valid:
        return _invalid_response(validation)

    report = determinism_report(automaton)
    return JsonResponse({
        'type': report.classification.value,
        'report': _report_to_json(report),
    })


@csrf_exempt
@require_POST
@handle_engine_errors
def analyse_fsa(request):
    data = json.loads(request.body)
    analysis = analyse_automaton(_load_automaton(data))

    return JsonResponse({
        'validation': _validation_to_json(analysis.validation),
        'type': analysis.classification.value,
        'report': _report_to_json(analysis.determinism),
        'reachable_states': list(analysis.reachable_states),
        'unreachable_states': list(analysis.unreachable_states),
        'dead_states': list(analysis.dead_states),
        'has_cycle': analysis.has_cycle,
        'has_self_loops': analysis.has_self_loops,
        'accepts_empty_string': analysis.accepts_empty_string,
        'statistics': analysis.statistics,
    })


@csrf_exempt
@require_POST
@handle_engine_errors
def simulate_fsa(request):
    """
    Run an automaton on an input string.

    Expects a POST request with a JSON body containing:
    - fsa or text: The automaton
    - input: The input string, or a list of symbols for multi-character
      alphabets

    Returns a JSON response with the verdict and the step-by-step trace.
    """
    data = json.loads(request.body)
    automaton = _load_automaton(data)
    input_symbols = data.get('input', '')

    validation = validate_automaton(automaton)
    if not validation.is_valid:
        return _invalid_response(validation)

    result = simulate(automaton, input_symbols)
    response = _simulation_to_json(result)
    response['type'] = determinism_report(automaton).classification.value
    return JsonResponse(response)


@csrf_exempt
@require_POST
@handle_engine_errors
def convert_nfa_to_dfa(request):
    """
    Convert an NFA to a DFA with subset construction.

    Set "complete" in the body to keep the empty subset as a dead state.
    """
    data = json.loads(request.body)
    automaton = _load_automaton(data)

    validation = validate_automaton(automaton)
    if not validation.is_valid:
        return _invalid_response(validation)
    _check_size(automaton)

    conversion = subset_construction(automaton, complete=bool(data.get('complete', False)))

    if conversion.original_type == Classification.DFA:
        message = 'FSA is already deterministic, relabelled by subset construction'
    else:
        message = 'NFA successfully converted to DFA'

    return JsonResponse({
        'success': True,
        'original_fsa': automaton.to_dict(),
        'converted_dfa': conversion.dfa.to_dict(),
        'subsets': {label: list(states) for label, states in conversion.subsets.items()},
        'statistics': {
            'original_type': conversion.original_type.value,
            'original_states': conversion.original_state_count,
            'converted_states': conversion.converted_state_count,
            'max_possible_states': conversion.max_possible_states,
            'efficiency_percentage': conversion.efficiency_percentage,
        },
        'message': message,
    })


@csrf_exempt
@require_POST
@handle_engine_errors
def min_dfa(request):
    """Minimise a DFA; nondeterministic input is rejected with a 400."""
    data = json.loads(request.body)
    automaton = _load_automaton(data)

    validation = validate_automaton(automaton)
    if not validation.is_valid:
        return _invalid_response(validation)
    _check_size(automaton)

    result = minimise_with_details(automaton)

    if result.is_already_minimal:
        message = 'DFA is already minimal'
    else:
        message = f'DFA minimised by removing {result.states_reduced} state(s)'

    return JsonResponse({
        'success': True,
        'original_fsa': automaton.to_dict(),
        'minimised_fsa': result.dfa.to_dict(),
        'equivalence_classes': {label: list(states) for label, states in result.equivalence_classes.items()},
        'statistics': {
            'original_states': result.original_state_count,
            'minimised_states': result.minimised_state_count,
            'states_reduced': result.states_reduced,
            'reduction_percentage': result.reduction_percentage,
        },
        'message': message,
    })


@csrf_exempt
@require_POST
@handle_engine_errors
def check_equivalence(request):
    """Compare the languages of "fsa"/"text" and "other"/"other_text"."""
    data = json.loads(request.body)
    first = _load_automaton(data)
    second = _load_automaton(data, key='other', text_key='other_text')

    for automaton in (first, second):
        validation = validate_automaton(automaton)
        if not validation.is_valid:
            return _invalid_response(validation)
        _check_size(automaton)

    equivalent, details = are_automata_equivalent(first, second)
    return JsonResponse({'equivalent': equivalent, 'details': details})
