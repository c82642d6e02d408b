#!/usr/bin/env python
from setuptools import (
    find_packages,
    setup,
)

description = "w3storage: CAR ingest, retrieval and DAG sizing for IPFS Cluster backed storage"

extras_require = {
    "dev": [
        "build>=0.9.0",
        "ipython",
        "mypy==1.10.0",
        "pre-commit>=3.4.0",
        "tox>=4.0.0",
        "twine",
        "wheel",
    ],
    "test": [
        "pytest>=7.0.0",
        "pytest-xdist>=2.4.0",
        "pytest-trio>=0.5.2",
        "factory-boy>=3.2.0",
    ],
}

extras_require["dev"] = extras_require["dev"] + extras_require["test"]

try:
    with open("./README.md", encoding="utf-8") as readme:
        long_description = readme.read()
except FileNotFoundError:
    long_description = description

install_requires = [
    "dag-cbor>=0.3.3",
    "fastapi>=0.110.0",
    "httpx>=0.27.0",
    "hypercorn[trio]>=0.16.0",
    "lru-dict>=1.1.6",
    "multiformats>=0.3.1",
    "protobuf>=6.30.1",
    "trio>=0.26.0",
]

setup(
    name="w3storage",
    version="0.1.0",
    description=description,
    long_description=long_description,
    long_description_content_type="text/markdown",
    include_package_data=True,
    install_requires=install_requires,
    python_requires=">=3.10, <4",
    extras_require=extras_require,
    license="MIT",
    zip_safe=False,
    keywords="ipfs car ipld dag web3.storage",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"w3storage": ["py.typed", "car/pb/*.proto", "car/pb/*.pyi"]},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Natural Language :: English",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    platforms=["unix", "linux", "osx", "win32"],
    entry_points={
        "console_scripts": [
            "w3storage-api=w3storage.cli:main",
        ],
    },
)
