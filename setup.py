from setuptools import setup, find_packages

setup(
    name="quadworld",
    version="0.1.0",
    packages=find_packages(exclude=["tests"]),
    install_requires=[
        "numpy>=1.20.0",
        "pygame>=2.0.0",  # For the world viewer
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": ["quadworld=quadworld.__main__:main"],
    },
)
