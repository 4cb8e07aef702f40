from setuptools import setup, find_packages

setup(
    name="connect-four-quiz",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "gymnasium",  # Environment wrapper around the local engine
        "pydantic>=2",  # Remote game documents
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "connect-four=connect_four.interfaces.cli:main",
        ],
    },
)
