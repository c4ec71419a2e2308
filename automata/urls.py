from django.urls import path
from . import views

urlpatterns = [
    # Text format to JSON
    path('api/parse/', views.parse_text, name='parse_text'),

    # Structure and type checks
    path('api/validate/', views.validate_fsa, name='validate_fsa'),
    path('api/classify/', views.classify_fsa, name='classify_fsa'),
    path('api/analyse/', views.analyse_fsa, name='analyse_fsa'),

    # Simulation for both DFAs and NFAs
    path('api/simulate/', views.simulate_fsa, name='simulate_fsa'),

    # FSA Transformation endpoints
    path('api/nfa-to-dfa/', views.convert_nfa_to_dfa, name='nfa_to_dfa'),
    path('api/minimise-dfa/', views.min_dfa, name='minimise_dfa'),
    path('api/equivalence/', views.check_equivalence, name='check_equivalence'),
]
