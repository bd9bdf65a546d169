#! python Setup.py

from setuptools import setup, find_packages

setup(
    name="seqtrack",
    version="1.0.0",
    author="Sottoriva Lab",
    description="JSON sample tracking database for sequencing projects",
    packages=find_packages(
        include=[
            "seqtrack",
            "seqtrack.*",
        ]
    ),
    python_requires=">=3.11",
    install_requires=[
        "click>=8.1.7",
        "colorama>=0.4.6",
        "jsonschema>=4.18",
        "packaging>=24.1",
        "pandas>=2.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
        ],
    },
    include_package_data=True,
    package_data={
        "seqtrack.db": ["schema/*.json"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    entry_points={
        "console_scripts": [
            "seqtrack=seqtrack.utils.main_cli:main",
        ],
    },
)
