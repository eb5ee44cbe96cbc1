from pathlib import Path

from setuptools import find_packages, setup

NAME = "iicgen"
README = Path("README.md")

setup(
    name=NAME,
    version="0.1.0",
    description="Invoice Identification Code (IIC) generation for fiscal invoices",
    long_description=README.read_text(encoding="utf-8") if README.exists() else "",
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.10",
    install_requires=[
        "cryptography>=41",
        "lxml>=4.9",
        "openpyxl>=3.1",
    ],
    extras_require={"test": ["pytest>=7"]},
    entry_points={"console_scripts": ["iicgen = iicgen.cli:main"]},
)
