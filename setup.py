"""
Setup script for the crewmute package.

Installs the `crewmute` console command, which runs the Discord bot.
"""

from setuptools import setup, find_packages

setup(
    name="crewmute",
    version="1.0.0",
    description="CrewMute - Discord voice moderation for social deduction games",
    license="MIT",
    python_requires=">=3.11",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "discord.py>=2.3.0",
        "python-dotenv>=1.0.0",
        "pydantic>=2.5.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
        "dev": [
            "pytest>=7.4",
            "build",
            "wheel",
        ],
    },
    entry_points={
        "console_scripts": [
            "crewmute=crewmute.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "Framework :: AsyncIO",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Communications :: Chat",
    ],
)
