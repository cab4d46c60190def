"""truckq setup - offline action queue for the food-truck client."""
from setuptools import setup, find_packages

setup(
    name="truckq",
    version="0.1.0",
    description="truckq: offline action queue and replay for the food-truck ordering client",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "click>=8.0",
        "blake3>=0.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "truckq=truckq.cli.main:cli",
        ],
    },
)
