"""
Setup script for commerce-tutor.

Commerce Tutor is a terminal study companion for GSEB Commerce
classes 11 and 12. It serves three roles:

1. Lessons - AI-generated, topic-by-topic chapter explanations
2. Practice - chapter quizzes and glossaries
3. Progress - completed chapters and latest quiz scores, stored locally

Generated content is cached locally so revisiting a chapter works
without another round trip to the model.
"""

from setuptools import find_packages, setup

setup(
    name="commerce-tutor",
    version="1.0.0",
    description="Terminal study companion for GSEB Commerce with AI-generated lessons and quizzes",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Commerce Tutor",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # AI
        "google-generativeai>=0.8.0",
        "google-api-core>=2.11.0",
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
            "commerce-tutor=commerce_tutor.cli.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
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
    keywords="learning quiz cli education gseb commerce gemini",
)
