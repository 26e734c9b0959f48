from setuptools import setup, find_packages


setup(
    name="apak",
    version="0.1",
    packages=find_packages(include=["apak", "apak.*"]),
    description="Single-file pack archives: named entries split into deflated, obfuscated 1 MiB blocks behind a trailing index.",
    author="vercingetorx",
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "apak=apak.cli:main",
        ]
    },
)
