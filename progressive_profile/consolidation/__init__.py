"""
consolidation/ - Progressive Profile Consolidation Engine

Modules:
    utils.py                   - Decimal utilities
    scale_normalizer.py        - Legacy (0-5) / CLP2 (0-3) <-> [0, 1]
    weighting_table.py         - Respondent weighting table (+ weighting_table.json)
    score_merger.py            - Weighted-average score merger
    confidence_estimator.py    - Confidence with diminishing returns
    completeness_estimator.py  - Context coverage x answer quality
    conflict_detector.py       - Cross-context conflict flags and agreement
    analysis.py                - Consolidation analysis and recommendations
    profile_consolidator.py    - Orchestrator: one assessment -> next profile
"""
