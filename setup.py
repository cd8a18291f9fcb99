from setuptools import find_packages, setup

setup(
    name="whstats",
    version="1.0.0",
    description="CLI comparing Redmine booked hours with timelogger clocked hours",
    packages=find_packages(include=["whstats", "whstats.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests",
        "pyodbc",
        "typer",
        "keyring",
        "python-dateutil",
        "python-dotenv",
        "dateparser",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'whstats=whstats.cli:app'
        ]
    }
)
