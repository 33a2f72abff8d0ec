"""Setup configuration for the Modrelay Discord event relay."""

from setuptools import setup, find_packages

setup(
    name="modrelay",
    version="0.0.1",
    description="Relays Discord gateway events to an automation webhook as normalized JSON",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "py-cord>=2.6",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
        "requests>=2.31",
        "prompt_toolkit>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "modrelay=modrelay.main:main",
        ],
    },
)
