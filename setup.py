from setuptools import setup, find_packages

setup(
    name="whackamole",
    version="0.1.0",
    description="Timed whack-a-mole session engine with leveling, combos and a local leaderboard",
    author="Whack-a-Mole",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"whackamole.database": ["schema.sql"]},
    python_requires=">=3.11",
    install_requires=[
        "PyQt6>=6.6.0",
    ],
    extras_require={
        "test": ["pytest>=7.4", "pytest-qt>=4.2"],
    },
    entry_points={
        "console_scripts": [
            "whackamole=whackamole.main:main",
        ],
    },
)
