"""
learnloop: adaptive multiple-choice practice companion.

Serves questions (AI generated, cached or from a static bank), records every
answer, finds weak concepts and produces skill assessments.
"""

__version__ = "1.0.0"
