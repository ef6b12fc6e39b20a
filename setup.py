from setuptools import setup, find_packages

setup(
    name="glitchtrip",
    version="0.1.0",
    description="Still-image glitch pipeline: channel split, attractor waves, block jitter, pixel sort, film and color grade",
    packages=find_packages(include=["glitchtrip", "glitchtrip.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.24",
        "scipy>=1.10",
        "Pillow>=10.1",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "glitchtrip=glitchtrip.cli:main",
        ],
    },
)
