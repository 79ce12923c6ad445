"""
Adaptive analysis.

Components:
- WeaknessAnalyzer: weak concepts, recommended actions and the learning path
- SkillAssessor: skill tree scoring, benchmarks, certifications and interview readiness
- interview_profiles: interview type and company profile tables
"""

from .skill_assessor import Assessment, SkillAssessor
from .weakness_analyzer import Severity, TargetedTopic, WeaknessAnalyzer, WeaknessReport

__all__ = [
    "WeaknessAnalyzer",
    "WeaknessReport",
    "Severity",
    "TargetedTopic",
    "SkillAssessor",
    "Assessment",
]
