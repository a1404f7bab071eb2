import os
import re
import setuptools
from typing import List


def get_content(file: str) -> str:
    with open(file, "r", encoding="utf-8") as f:
        return f.read()


def get_version(package: str) -> str:
    path = os.path.join(package, "version.py")
    return re.search("__version__ = ['\"]([^'\"]+)['\"]", get_content(path)).group(1)


def get_packages(package: str) -> List[str]:
    return [
        directory.replace(os.sep, ".")
        for directory, subdirectories, filenames in os.walk(package)
        if os.path.exists(os.path.join(directory, "__init__.py"))
    ]


setuptools.setup(
    name="chillgamer_core",
    version=get_version("chillgamer_core"),
    packages=get_packages("chillgamer_core"),
    author="ChillGamer developers",
    description="ChillGamer core REST API for game reviews and watchlists",
    long_description=get_content("README.md"),
    long_description_content_type="text/markdown",
    license="GPLv3",
    install_requires=[
        "fastapi>=0.100.0,<1.0",
        "motor>=3.1,<4.0",
        "pydantic>=2.0,<3.0",
        "pydantic-settings>=2.0,<3.0",
        "pymongo>=4.4,<5.0",
        "uvicorn>=0.20.0,<1.0"
    ],
    extras_require={
        "test": [
            "httpx>=0.24.0",
            "mongomock-motor>=0.0.21"
        ]
    },
    entry_points={
        "console_scripts": [
            "chillgamer_core=chillgamer_core.__main__:main"
        ]
    },
    project_urls={},
    python_requires=">=3.8",
    classifiers=[
        "Operating System :: OS Independent",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Framework :: FastAPI",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Development Status :: 4 - Beta"
    ]
)
