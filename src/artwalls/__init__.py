"""
Artwalls - Artist onboarding and earnings core.

Packages:
- artwalls: plans, earnings engine, profile completeness, persistence, analytics
- onboarding: the resumable six-step artist onboarding wizard
"""

__version__ = "1.0.0"
