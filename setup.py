#!/usr/bin/env python3
"""
ShieldFlow VPN - simulated VPN client dashboard
Setup configuration
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
if requirements_file.exists():
    with open(requirements_file) as f:
        requirements = [
            line.strip()
            for line in f
            if line.strip() and not line.startswith('#')
        ]
else:
    requirements = [
        'PyYAML>=6.0',
        'rich>=13.0.0',
        'textual>=0.47.0',
        'google-genai>=1.0.0',
    ]

setup(
    name="shieldflow-vpn",
    version="1.0.2",
    author="ShieldFlow Team",
    author_email="info@example.com",
    description="Simulated VPN client dashboard with AI server recommendations",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=['tests', 'tests.*']),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "Environment :: Console :: Curses",
        "Topic :: System :: Networking",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        'dev': [
            'pytest>=7.4.0',
            'pytest-asyncio>=0.23.0',
            'pytest-cov>=4.1.0',
            'pytest-timeout>=2.1.0',
            'black>=23.7.0',
            'flake8>=6.1.0',
            'mypy>=1.5.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'shieldflow=shieldflow.cli.interface:main',
        ],
    },
    zip_safe=False,
    keywords='vpn dashboard simulator textual gemini',
)
