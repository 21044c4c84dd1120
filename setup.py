#!/usr/bin/env python

from setuptools import find_packages, setup

install_requires = [
    "openstacksdk>=1.0.0",
    "keystoneauth1>=5.0.0",
    "kubernetes>=28.1.0",
    "pydantic>=2.0",
    "PyYAML>=6.0.1",
    "structlog>=23.1.0",
    "urllib3>=1.26",
]

tests_requires = [
    "pytest>=7.1.2",
]

setup(
    name="openstack-site-agent",
    version="0.1.0",
    author="OpenNode Team",
    author_email="info@opennodecloud.com",
    license="MIT",
    description="Tenant-aware network provisioning on OpenStack.",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    python_requires=">=3.9",
    install_requires=install_requires,
    tests_require=tests_requires,
    extras_require={"tests": tests_requires},
    packages=find_packages(include=["openstack_site_agent", "openstack_site_agent.*"]),
    entry_points={
        "console_scripts": [
            "openstack-site-agent=openstack_site_agent.main:main",
        ],
    },
    classifiers=[
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
