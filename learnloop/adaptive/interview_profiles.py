"""
Static tables for mock interviews and company question sets.

- INTERVIEW_TYPES: session length, difficulty mix and topics per interview type
- COMPANY_PROFILES: interview style, topics, levels, prompts and tips per company
- DIFFICULTY_LEVELS: interview difficulty -> question level
"""

from __future__ import annotations

from dataclasses import dataclass, field

from learnloop.core.errors import UnknownProfile


@dataclass(frozen=True)
class DifficultyMix:
    """Percentages of easy / medium / hard questions."""

    easy: int
    medium: int
    hard: int

    def counts(self, total: int) -> dict[str, int]:
        easy = total * self.easy // 100
        medium = total * self.medium // 100
        return {"easy": easy, "medium": medium, "hard": total - easy - medium}


@dataclass(frozen=True)
class InterviewType:
    key: str
    name: str
    description: str
    duration_minutes: int
    minutes_per_question: int
    mix: DifficultyMix
    topics: tuple[str, ...]

    @property
    def question_count(self) -> int:
        return self.duration_minutes // self.minutes_per_question


@dataclass(frozen=True)
class CompanyProfile:
    key: str
    name: str
    description: str
    focus: str
    difficulty: str
    minutes_per_question: int
    question_types: tuple[str, ...]
    topics: tuple[str, ...]
    levels: tuple[str, ...]
    question_count: int
    tips: tuple[str, ...]
    prompts: dict[str, str] = field(default_factory=dict)
    mix: DifficultyMix | None = None


DIFFICULTY_LEVELS: dict[str, str] = {
    "easy": "beginner",
    "medium": "intermediate",
    "hard": "advanced",
}


INTERVIEW_TYPES: dict[str, InterviewType] = {
    t.key: t
    for t in (
        InterviewType(
            "technical-general", "General Technical Interview",
            "Algorithms, data structures and problem-solving",
            45, 5, DifficultyMix(30, 50, 20),
            ("algorithms", "data-structures", "problem-solving", "coding"),
        ),
        InterviewType(
            "frontend-focused", "Frontend Developer Interview",
            "JavaScript, React, CSS and web technologies",
            45, 4, DifficultyMix(25, 55, 20),
            ("javascript", "react", "css", "web-development", "frontend"),
        ),
        InterviewType(
            "backend-focused", "Backend Developer Interview",
            "Backend and system design",
            60, 6, DifficultyMix(20, 50, 30),
            ("system-design", "databases", "apis", "backend", "scalability"),
        ),
        InterviewType(
            "full-stack", "Full-Stack Developer Interview",
            "Frontend and backend together",
            60, 5, DifficultyMix(25, 50, 25),
            ("javascript", "react", "nodejs", "databases", "system-design"),
        ),
        InterviewType(
            "data-science", "Data Science Interview",
            "Data science and machine learning",
            50, 6, DifficultyMix(30, 45, 25),
            ("machine-learning", "statistics", "python", "data-analysis"),
        ),
        InterviewType(
            "quick-practice", "Quick Practice Session",
            "Short session for a quick skill check",
            15, 3, DifficultyMix(40, 40, 20),
            ("general",),
        ),
    )
}


def _prompts(**kinds: str) -> dict[str, str]:
    return {kind.replace("_", "-"): text for kind, text in kinds.items()}


COMPANY_PROFILES: dict[str, CompanyProfile] = {
    c.key: c
    for c in (
        CompanyProfile(
            "google", "Google",
            "Algorithmic problem-solving with focus on optimization and scalability",
            "algorithms-and-optimization", "high", 8,
            ("coding", "system-design", "behavioral"),
            ("algorithms", "data-structures", "system-design", "distributed-systems", "optimization"),
            ("intermediate", "advanced"), 50,
            (
                "Always discuss time and space complexity",
                "Think about edge cases and optimizations",
                "Consider scalability from the start",
                "Be prepared for follow-up questions",
            ),
            _prompts(
                coding="Generate a Google-style coding interview question that focuses on algorithmic "
                "thinking, optimization and scalability. Discuss time and space complexity.",
                system_design="Create a Google-style system design question about large-scale "
                "distributed systems, scalability and performance.",
                behavioral="Generate a Google-style behavioral question about leadership, innovation "
                "and problem-solving in ambiguous situations.",
            ),
            DifficultyMix(15, 45, 40),
        ),
        CompanyProfile(
            "amazon", "Amazon",
            "Leadership principles combined with technical depth and customer obsession",
            "leadership-and-scale", "medium-high", 7,
            ("coding", "system-design", "behavioral", "leadership"),
            ("system-design", "leadership-principles", "scalability", "aws", "distributed-systems"),
            ("intermediate", "advanced"), 60,
            (
                "Relate answers to Amazon Leadership Principles",
                "Focus on customer obsession in all responses",
                "Discuss scalability and cost optimization",
                "Prepare specific examples with metrics",
            ),
            _prompts(
                coding="Create an Amazon-style coding question that emphasizes practical problem-solving "
                "and scalability.",
                system_design="Generate an Amazon-style system design question about scalable, "
                "cost-effective systems serving millions of customers.",
                behavioral="Create a behavioral question based on Amazon Leadership Principles: customer "
                "obsession, ownership and delivering results.",
                leadership="Generate a leadership scenario question about decision-making and driving "
                "results in ambiguous situations.",
            ),
            DifficultyMix(20, 50, 30),
        ),
        CompanyProfile(
            "meta", "Meta (Facebook)",
            "Product thinking combined with technical execution and user impact",
            "product-and-impact", "medium-high", 8,
            ("coding", "system-design", "product", "behavioral"),
            ("product-design", "social-systems", "real-time-systems", "mobile-development", "user-experience"),
            ("intermediate", "advanced"), 45,
            (
                "Think about user experience and engagement",
                "Consider mobile-first approaches",
                "Discuss metrics and impact measurement",
                "Focus on building for billions of users",
            ),
            _prompts(
                coding="Generate a Meta-style coding question about building features for billions of "
                "users with attention to performance.",
                system_design="Create a Meta-style system design question about social features at "
                "scale: real-time updates, news feeds, global distribution.",
                product="Design a product thinking question about user engagement and growth.",
                behavioral="Generate a behavioral question about working in a fast-paced, "
                "impact-driven culture.",
            ),
            DifficultyMix(25, 45, 30),
        ),
        CompanyProfile(
            "microsoft", "Microsoft",
            "Collaborative problem-solving with focus on inclusive technology",
            "collaboration-and-inclusion", "medium", 7,
            ("coding", "system-design", "behavioral", "collaboration"),
            ("cloud-computing", "enterprise-solutions", "accessibility", "collaboration", "azure"),
            ("beginner", "intermediate", "advanced"), 40,
            (
                "Emphasize teamwork and collaboration",
                "Show inclusive and accessible thinking",
                "Discuss enterprise and security considerations",
                "Demonstrate growth mindset",
            ),
            _prompts(
                coding="Create a Microsoft-style coding question that emphasizes clean, maintainable code.",
                system_design="Generate a Microsoft-style system design question about enterprise cloud "
                "solutions, security and accessibility.",
                behavioral="Design a behavioral question about collaboration and working with diverse teams.",
                collaboration="Create a scenario question about driving consensus in cross-functional "
                "technical decisions.",
            ),
            DifficultyMix(30, 45, 25),
        ),
        CompanyProfile(
            "apple", "Apple",
            "Design excellence and user experience with attention to detail",
            "design-and-excellence", "high", 9,
            ("coding", "system-design", "design", "behavioral"),
            ("user-experience", "performance-optimization", "design-systems", "mobile-development", "privacy"),
            ("intermediate", "advanced"), 35,
            (
                "Focus on user experience and design thinking",
                "Emphasize performance and efficiency",
                "Consider privacy and security implications",
                "Show attention to detail and craftsmanship",
            ),
            _prompts(
                coding="Generate an Apple-style coding question that emphasizes performance and elegance.",
                system_design="Create an Apple-style system design question about integrated experiences "
                "across devices with privacy in mind.",
                design="Design a question about intuitive, accessible user interfaces.",
                behavioral="Generate a behavioral question about attention to detail and excellence.",
            ),
        ),
        CompanyProfile(
            "netflix", "Netflix",
            "Streaming technology and data-driven decision making at scale",
            "streaming-and-data", "high", 8,
            ("coding", "system-design", "data", "behavioral"),
            ("streaming-technology", "recommendation-systems", "data-engineering", "content-delivery",
             "machine-learning"),
            ("intermediate", "advanced"), 30,
            (
                "Think about global scale and performance",
                "Consider data-driven decision making",
                "Focus on personalization and recommendations",
                "Discuss A/B testing and experimentation",
            ),
            _prompts(
                coding="Create a Netflix-style coding question about streaming, content delivery or "
                "recommendation algorithms.",
                system_design="Generate a Netflix-style system design question about global streaming "
                "infrastructure.",
                data="Design a data engineering question about viewing patterns or A/B testing at scale.",
                behavioral="Create a behavioral question about freedom and responsibility in a "
                "high-performance culture.",
            ),
        ),
        CompanyProfile(
            "uber", "Uber",
            "Real-time systems and marketplace dynamics at global scale",
            "real-time-and-marketplace", "high", 7,
            ("coding", "system-design", "marketplace", "behavioral"),
            ("real-time-systems", "geolocation", "marketplace-design", "optimization-algorithms",
             "distributed-systems"),
            ("intermediate", "advanced"), 35,
            (
                "Focus on real-time and location-based problems",
                "Consider marketplace dynamics and optimization",
                "Think about global scale and localization",
                "Discuss operational efficiency and reliability",
            ),
            _prompts(
                coding="Generate an Uber-style coding question about real-time matching or geolocation.",
                system_design="Create an Uber-style system design question about dynamic pricing or "
                "real-time matching.",
                marketplace="Design a question about supply-demand optimization in two-sided markets.",
                behavioral="Generate a behavioral question about operational excellence in a fast-paced "
                "global environment.",
            ),
        ),
        CompanyProfile(
            "startup", "Startup/Scale-up",
            "Practical problem-solving with resource constraints and rapid growth",
            "practical-and-adaptable", "medium", 6,
            ("coding", "practical", "growth", "behavioral"),
            ("mvp-development", "rapid-prototyping", "growth-hacking", "resource-optimization", "full-stack"),
            ("beginner", "intermediate"), 25,
            (
                "Focus on practical, working solutions",
                "Show ability to work with constraints",
                "Emphasize speed and iteration",
                "Demonstrate ownership and adaptability",
            ),
            _prompts(
                coding="Create a startup-style coding question about building working solutions quickly "
                "with limited resources.",
                practical="Generate a practical question about scaling fast or living with technical debt.",
                growth="Design a question about features that drive user growth in constrained environments.",
                behavioral="Create a behavioral question about adaptability and ownership in fast-changing "
                "environments.",
            ),
            DifficultyMix(35, 45, 20),
        ),
    )
}


def interview_type(key: str) -> InterviewType:
    try:
        return INTERVIEW_TYPES[key]
    except KeyError:
        raise UnknownProfile("interview type", key) from None


def company_profile(key: str) -> CompanyProfile:
    try:
        return COMPANY_PROFILES[key]
    except KeyError:
        raise UnknownProfile("company", key) from None
