"""Setup script for the Calley recurrence expansion engine."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README file
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# pytest pins go to the dev extra
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
dev_requirements = []

if requirements_file.exists():
    for line in requirements_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        (dev_requirements if line.startswith("pytest") else requirements).append(line)

setup(
    name="calley-recurrence",
    version="0.1.0",
    description="RFC 5545 recurrence expansion engine for Calley calendar items",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Calley Team",
    # Package configuration
    packages=find_packages(exclude=["tests*", "docs*"]),
    include_package_data=True,
    # Dependencies
    install_requires=requirements,
    extras_require={
        "dev": dev_requirements,
    },
    python_requires=">=3.11",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Office/Business :: Scheduling",
        "Topic :: Software Development :: Libraries",
    ],
    keywords="calendar rrule recurrence icalendar rfc5545",
    package_data={
        "calley_recurrence": ["py.typed"],
    },
    zip_safe=False,
)
