#!/usr/bin/env python

from setuptools import setup

setup(
    name="blobdav",
    version="1.01",
    description="Filesystem-like HTTP gateway for flat S3 compatible object stores",
    packages=["blobdav", "blobdav.api", "blobdav.objectstorage"],
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.10",
    keywords=["API", "WebDAV", "S3", "object storage"],
    classifiers=[
        "License :: OSI Approved :: MIT License",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
        "Topic :: System :: Filesystems",
    ],
    install_requires=[
        "fastapi",
        "python-dotenv",
        "pydantic>=2",
        "pydantic-settings",
        "uvicorn",
        "aiobotocore",
        "types-aiobotocore-s3",
        "async-lru",
    ],
    extras_require={
        "dev": [
            "pytest",
            "httpx",
            "anyio",
            "mypy",
            "flake8",
        ]
    },
    entry_points={
        "console_scripts": [
            "blobdav = blobdav.__main__:main",
        ]
    },
)
