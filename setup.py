"""
Setup script for ad-reconcile.
"""

from setuptools import setup, find_packages

setup(
    name="ad-reconcile",
    version="0.1.0",
    description="Active Directory reports and HR termination reconciliation",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "ldap3>=2.9",
        "pydantic>=2.0",
        "mcp>=1.2,<2",
        "anyio>=4.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ad-reconcile=ad_reconcile.cli:main",
            "ad-reconcile-mcp=ad_reconcile.server:main",
        ],
    },
)
