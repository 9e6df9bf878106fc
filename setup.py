from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="ssl-cli",
    version="1.0.0",
    author="SSL CLI Team",
    description="Local certificate authority, domain certificates and nginx/certbot setup from one CLI",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    entry_points={
        'console_scripts': [
            'ssl-cli=ssl_cli.cli:main'
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "cryptography>=42.0.0",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "click>=8.0",
        "rich>=13.0",
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
        'dev': [
            'pre-commit',
            'pylint',
        ]
    }
)
