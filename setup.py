from setuptools import setup, find_packages


with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="loadstats",
    version="0.1.0",
    description="Streaming per-group statistics for load-test result logs.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"loadstats.schemas": ["*.json"]},
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.22",
        "pandas>=1.5",
        "PyYAML>=6.0",
        "jsonschema>=4.0",
    ],
    extras_require={"dev": ["pytest"]},
)
