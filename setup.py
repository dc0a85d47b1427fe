"""Packaging for PT Timer.

Install for development:
    pip install -e ".[test]"

Build a macOS .app bundle (optional):
    pip install py2app
    python setup.py py2app
"""

from setuptools import setup, find_packages

APP = ["main.py"]
DATA_FILES = []
OPTIONS = {
    "argv_emulation": False,
    "plist": {
        "CFBundleName": "PT Timer",
        "CFBundleDisplayName": "PT Timer",
        "CFBundleIdentifier": "com.pttimer.app",
        "CFBundleVersion": "0.1.0",
        "CFBundleShortVersionString": "0.1.0",
        "LSMinimumSystemVersion": "13.0",
    },
}

setup(
    app=APP,
    data_files=DATA_FILES,
    options={"py2app": OPTIONS},
    name="pttimer",
    version="0.1.0",
    description="Interval workout timer with reps and total-time modes",
    packages=find_packages(include=["pttimer", "pttimer.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.5",
        "SQLAlchemy>=2.0",
        "numpy>=1.24",
        "structlog>=23.1",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": ["pttimer=pttimer.__main__:main"],
    },
)
