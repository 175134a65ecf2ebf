#!/usr/bin/env python3
"""Setup script for MindTree."""

from setuptools import setup, find_packages

setup(
    name="mindtree",
    version="1.0.0",
    description="A tree-document mind map editor with undo history and drag-to-reparent",
    author="MindTree Project",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    # The editing engine is pure Python; the GTK front end is optional so the
    # engine installs on machines without the GObject system libraries.
    install_requires=[],
    extras_require={
        "gui": [
            "PyGObject>=3.46.0",
            "pycairo>=1.25.0",
        ],
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "mindtree=mindtree.launcher:main",
        ],
        "gui_scripts": [
            "mindtree-gui=mindtree.launcher:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: X11 Applications :: GTK",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Office/Business",
    ],
)
