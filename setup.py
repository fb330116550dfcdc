from setuptools import setup, find_packages


with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="patternrace",
    version="0.1.0",
    description=(
        "Monte Carlo estimates of first-occurrence times and pairwise win "
        "rates for U/D patterns."
    ),
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    packages=find_packages(exclude=("tests",)),
    python_requires=">=3.9",
    install_requires=["numpy", "pandas", "PyYAML"],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["patternrace=patternrace.cli:main"]},
)
