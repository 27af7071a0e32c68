from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="sjfsched",
    version="0.1.0",
    author="",
    author_email="",
    description="Preemptive Shortest-Job-First process manager for POSIX systems.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    python_requires=">=3.10",
    install_requires=[
        "decologr",
    ],
    extras_require={
        "test": ["pytest>=7.0"]
    },
    entry_points={
        "console_scripts": [
            "sjfsched=sjfsched.cli:main",
        ],
    },
)
