# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="logkeeper",
    version="1.0.0",
    description="Application logger with NDJSON persistence, rotation, retention and gzip archiving",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["logkeeper", "logkeeper.*"]),
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        'console_scripts': [
            'logkeeper=logkeeper.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
