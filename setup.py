#!/usr/bin/env python

from setuptools import setup

setup(
    name="esdeprecation",
    version="0.1.0",
    description="Detect deprecated and removed settings and mappings in Elasticsearch index metadata",
    packages=["esdeprecation"],
    include_package_data=True,
    zip_safe=False,
    keywords=["elasticsearch", "upgrade", "deprecation"],
    classifiers=[
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Topic :: Database",
    ],
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2",
        "pydantic-settings",
        "python-dotenv",
        "class-doc",
        "typing_extensions",
    ],
    extras_require={
        'dev': [
            'pytest',
            'mypy',
            'flake8',
        ]
    },
    entry_points={
        'console_scripts': [
            'esdeprecation = esdeprecation.__main__:main'
        ]
    },
)
