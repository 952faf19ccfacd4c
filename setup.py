from setuptools import setup, find_packages

setup(
    name="r53hc",
    version="0.3.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "boto3>=1.28",
        "botocore>=1.31",
        "cli-core-yo>=1.0,<2",
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "rich>=13.0",
        "typer>=0.9",
    ],
    extras_require={
        "tests": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "r53hc=r53hc.cli:main",
        ],
    },
)
