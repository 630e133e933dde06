"""
Setup script for quizix-analytics.

Quizix Analytics is the results analytics engine behind the quiz results
viewer. It turns saved quiz sessions into:

1. Question Diagnostics - Success rates, timing and heuristic problem flags
2. Concept Mastery - Per-concept rollups and inferred concept dependencies
3. Session Comparison - Trends across several runs of the same quiz

The 'quizstats' command renders the same analytics in the terminal.
"""

from setuptools import find_packages, setup

setup(
    name="quizix-analytics",
    version="1.0.0",
    description="Results analytics engine for saved quiz sessions",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Quizix",
    packages=find_packages(include=["src", "src.*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
        # Dates
        "python-dateutil>=2.8.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "quizstats=src.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Testing",
    ],
    keywords="quiz analytics education assessment",
)
