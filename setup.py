# setup.py
from setuptools import find_namespace_packages, setup

setup(
    name="rdatree",
    version="0.1.0",
    description="Loads RDA V2.2 resource archives into an in-memory, path-indexed file tree",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'rdatree=rdatree.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
