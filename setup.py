"""
WardenMQTT - Authorization layer for MQTT brokers

Setup script for installation via pip
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name='wardenmqtt',
    version='1.0.0',
    description='Username/password authentication and per-topic ACL policies for MQTT brokers',
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=('tests', 'tests.*', 'examples')),
    python_requires='>=3.7',
    install_requires=[
        # No runtime dependencies
    ],
    extras_require={
        'dev': [
            'pytest>=6.0',
            'ruff>=0.1.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'wardenmqtt=wardenmqtt.cli:main',
        ],
    },
    classifiers=[
        'Development Status :: 5 - Production/Stable',
        'Intended Audience :: Developers',
        'Topic :: System :: Networking',
        'Topic :: Communications',
        'Topic :: Security',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.7',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Operating System :: OS Independent',
    ],
    keywords='mqtt broker acl authorization authentication iot',
    license='Apache-2.0',
    platforms='any',
)
