#!/usr/bin/env python3

"""
tftoolkit - Terraform Toolkit

A Python package for module-grouped terraform plan summaries, infracost cost
tables and terraform quality checks in the terminal.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text(encoding="utf-8") if readme_path.exists() else ""

# Read version from package
version_file = Path(__file__).parent / "tftoolkit" / "__init__.py"
version_line = [line for line in version_file.read_text().split('\n') if line.startswith('__version__')][0]
version = version_line.split('=')[1].strip().strip('"').strip("'")

setup(
    name="tftoolkit",
    version=version,
    author="tftoolkit",
    description="Terminal summaries for terraform plans, costs and checks",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["tftoolkit", "tftoolkit.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Build Tools",
        "Topic :: System :: Systems Administration",
        "Topic :: Utilities",
    ],
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=22.0.0",
            "flake8>=5.0.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "tftk=tftoolkit.cli:main",
            "tf-plan-summary=tftoolkit.cli:plan_summary_main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
    keywords="terraform plan summary infracost tflint tfsec cli",
)
