#!/usr/bin/env python
from setuptools import find_packages, setup

setup(
    name="psd2png",
    version="0.1.0",
    description="Batch conversion of Adobe Photoshop PSD/PSB files to flattened PNG",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages(where="src", include=["psd2png", "psd2png.*"]),
    install_requires=[
        "attrs>=23.1.0",
        "numpy",
        "Pillow>=10.0.0",
    ],
    extras_require={
        "tests": ["pytest", "pytest-asyncio"],
    },
    entry_points={
        "console_scripts": [
            "psd2png=psd2png.cli:main",
        ],
    },
)
