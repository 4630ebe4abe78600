"""Setup configuration for dependency_freshness"""

from setuptools import setup, find_packages

setup(
    name="dependency-freshness",
    version="0.1.0",
    description=(
        "CLI tool reporting how far the direct dependencies of a Maestro build "
        "lag behind their upstream branches, classified against SLAs."
    ),
    author="Dependency Freshness Contributors",
    author_email="",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests>=2.28.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "dependency-freshness=dependency_freshness.main:main",
        ],
    },
)
