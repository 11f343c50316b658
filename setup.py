"""
Co-Driver Trip Board – installation script
-----------------------------------------

Allows `pip install -e .` so the board library, its tests and the example
script can import `codriver_trips` without extra configuration.

Assumes the import root is a directory named `codriver_trips/`
containing an `__init__.py`.
"""
from pathlib import Path
from setuptools import setup, find_packages

# --------------------------------------------------------------------------- #
# Editable variables                                                          #
# --------------------------------------------------------------------------- #
PACKAGE_NAME = "codriver_trips"          # ← directory name on disk
VERSION = "0.1.0"
DESCRIPTION = "Co-driver job board: trip filtering, place suggestions and trip API client"
PYTHON_REQUIRES = ">=3.9"

# Core/runtime dependencies
INSTALL_REQUIRES = [
    "pandas>=1.5",
    "geopy>=2.3",
    "requests>=2.28",
    "python-dotenv>=1.0",
]

# Extra groups for development / CI
EXTRAS_REQUIRE = {
    "dev": [
        "pytest>=7.0",
        "black>=24.3",
        "ruff>=0.4",
    ]
}

# --------------------------------------------------------------------------- #
# Helper: read long description from README.md                                #
# --------------------------------------------------------------------------- #
this_dir = Path(__file__).resolve().parent
readme_path = this_dir / "README.md"
LONG_DESCRIPTION = readme_path.read_text(encoding="utf-8") if readme_path.exists() else DESCRIPTION

# --------------------------------------------------------------------------- #
# Call setup()                                                                #
# --------------------------------------------------------------------------- #
setup(
    name=PACKAGE_NAME,
    version=VERSION,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/markdown",
    python_requires=PYTHON_REQUIRES,
    packages=find_packages(exclude=("tests", "tests.*")),
    include_package_data=True,
    install_requires=INSTALL_REQUIRES,
    extras_require=EXTRAS_REQUIRE,
    entry_points={
        "console_scripts": [
            "codriver-board=codriver_trips.board:main",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
