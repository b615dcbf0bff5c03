"""stepchain Package Setup"""

from setuptools import find_packages, setup

setup(
    name="stepchain",
    version="0.1.0",
    description="Chainable proxy that serializes asynchronous steps",
    author="stepchain Team",
    packages=find_packages(include=["stepchain", "stepchain.*"]),
    python_requires=">=3.10",
    install_requires=[
        "httpx>=0.24.0",
        "structlog>=23.1.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "stepchain=stepchain.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Framework :: AsyncIO",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)
