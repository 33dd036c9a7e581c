"""
Setup file.
"""

from setuptools import find_packages, setup

KEYWORDS = "build c++ components dependencies include-paths linker cmake build-graph"


if __name__ == "__main__":
    setup(
        name="wirebuild",
        version="0.1.0",
        description="Component registry and build-graph wiring for C/C++ projects",
        keywords=KEYWORDS,
        python_requires=">=3.10",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        install_requires=[
            "requests",
            "tqdm",
        ],
        extras_require={
            "test": ["pytest"],
        },
        entry_points={
            "console_scripts": [
                "wire=wirebuild.cli:main",
            ],
        },
    )
