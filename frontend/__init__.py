"""
Dashboard Frontend Contracts

RESPONSIBILITY: Turn engine state into immutable view models and user
actions into engine calls
ALLOWED INPUTS: One injected DashboardEngine
OUTPUTS: DTOs, chart views, interaction outcomes, import feedback

WHAT THIS LAYER MUST NOT DO:
============================
- Hold its own copy of timeline or dataset state
- Let backend exceptions reach a view
- Infer values for missing years or sections
"""
