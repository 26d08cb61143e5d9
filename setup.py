from pathlib import Path

from setuptools import find_packages, setup

# Load README.md as long description
readme_path = Path(__file__).parent / "README.md"
long_description = (
    readme_path.read_text(encoding="utf-8")
    if readme_path.exists()
    else ""
)

setup(
    name="tmdb-movies",
    version="0.1.0",
    description=(
        "Cache-first TMDb movie metadata provider: on-disk snapshots, "
        "language negotiation and English overview fallback."
    ),
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(exclude=("tests", "tests.*")),
    include_package_data=True,
    install_requires=[
        # Core runtime
        "python-dotenv>=1.0",
        "requests>=2.31",
        "urllib3>=2.0",
        "typing_extensions>=4.9",
    ],
    extras_require={
        "dev": [
            # Tooling
            "black>=24.0",
            "ruff>=0.6",
            "pytest>=8.0",

            # Typing / static analysis
            "mypy>=1.8",

            # Stubs
            "types-requests>=2.31",
        ],
    },
    entry_points={
        "console_scripts": [
            "tmdb-movies=tmdb_movies.main:main",
        ]
    },
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Topic :: Multimedia :: Video",
    ],
)
