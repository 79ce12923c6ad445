"""
Setup script for learnloop.

learnloop is a terminal learning companion that interrupts you with short
multiple-choice questions. It serves three roles:

1. Practice - AI generated, cached or built-in questions at random intervals
2. Analysis - Weak concepts, learning paths and recommended actions
3. Assessment - Skill scores, benchmark gaps, certifications and interview readiness

The 'learnloop' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="learnloop",
    version="1.0.0",
    description="Adaptive multiple-choice practice companion with weakness analysis and skill assessment",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="learnloop contributors",
    packages=find_packages(include=["learnloop", "learnloop.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.7.0",
        # HTTP
        "httpx>=0.25.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "learnloop=learnloop.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning quiz adaptive cli education assessment",
)
